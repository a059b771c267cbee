"""Colors for the keel console output, in Rich markup syntax."""


class Theme:
    # Messages
    SUCCESS = "green"
    SUCCESS_BOLD = "bold green"
    ERROR_BOLD = "bold red"
    HEADER = "bold"
    DIM = "grey62"

    # Tables (graph, resolved dependencies)
    TABLE_ID = "cyan"
    TABLE_LABEL = "grey62"
    TABLE_VALUE = "bold"

    # One color per BuildStatus, plus tasks that just started
    STATUS_SUCCEEDED = "bold green"
    STATUS_FAILED = "bold red"
    STATUS_SKIPPED = "grey62"
    STATUS_BLOCKED = "bold yellow"
    STATUS_RUNNING = "cyan"

    # Tool output panel
    BORDER_ERROR = "red"


theme = Theme()
