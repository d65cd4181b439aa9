"""Error taxonomy for Table Deck Builder.

Every failure in the deck pipeline is terminal for the run.  Each error
carries a short ``kind`` used in the single top-level failure report.
"""


class TableDeckError(Exception):
    """Base class for all pipeline failures."""
    kind = "error"

    def describe(self) -> str:
        """Return ``kind: message`` plus the chained cause, if any."""
        text = f"{self.kind}: {self}"
        cause = self.__cause__
        if cause is not None:
            text += f" (caused by {type(cause).__name__}: {cause})"
        return text


class ConfigError(TableDeckError):
    """Configuration values or the config file are invalid."""
    kind = "config_error"


class InputNotFound(TableDeckError):
    """The source spreadsheet does not exist."""
    kind = "input_not_found"


class InputUnreadable(TableDeckError):
    """The source file exists but cannot be parsed into rows."""
    kind = "input_unreadable"


class EmptyDataset(TableDeckError):
    """The source has no data rows after removing the header."""
    kind = "empty_dataset"


class RenderError(TableDeckError):
    """A table image could not be rendered."""
    kind = "render_error"


class FontUnavailable(RenderError):
    """No usable font could be loaded on this host."""
    kind = "font_unavailable"


class PackageBuildFailure(TableDeckError):
    """The presentation package could not be built or serialized."""
    kind = "package_build_failure"
