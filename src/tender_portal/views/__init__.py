"""Controllers holding page state for the detail and list views."""

from tender_portal.views.debounce import Debouncer
from tender_portal.views.details import AttachmentRow, TenderDetailsController
from tender_portal.views.search import TenderSearchController

__all__ = ["AttachmentRow", "Debouncer", "TenderDetailsController", "TenderSearchController"]
