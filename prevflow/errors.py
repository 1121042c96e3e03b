# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy shared by the prevflow services.
"""


class PrevflowError(Exception):
    """Base class for prevflow service errors."""
    pass


class CaseStoreError(PrevflowError):
    """Raised when the case store cannot read or persist data."""

    def __init__(self, message: str, case_id: str = None):
        super().__init__(message)
        self.case_id = case_id


class SettingsError(PrevflowError):
    """Raised when office settings cannot be loaded or saved."""
    pass
