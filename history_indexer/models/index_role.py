"""Account index roles."""

from enum import StrEnum

from history_indexer.config.constants import (
    BLOCK_DESIGN_DOC,
    CONTRACT_DESIGN_DOC,
    FROM_DESIGN_DOC,
    TO_DESIGN_DOC,
)


class IndexRole(StrEnum):
    """Role an address plays in the transactions of one view."""

    CONTRACT = CONTRACT_DESIGN_DOC
    BLOCK = BLOCK_DESIGN_DOC
    FROM = FROM_DESIGN_DOC
    TO = TO_DESIGN_DOC

    @property
    def design_doc(self) -> str:
        """Design document holding the view for this role."""
        return self.value
