"""Domain composition root for the Tianguis marketplace."""

from protean.domain import Domain

from tianguis.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

tianguis = Domain(name="tianguis")
