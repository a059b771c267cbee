from rich.console import Console
from rich.table import Table

from src.cli.theme import theme
from src.domain.services.task_graph import TaskGraph


def format_graph(console: Console, graph: TaskGraph) -> None:
    """Print tasks in execution order with the tasks each one waits for."""
    table = Table(title="Task graph (execution order)")
    table.add_column("#", style=theme.TABLE_LABEL, justify="right")
    table.add_column("Task", style=theme.TABLE_ID)
    table.add_column("Toolchain", style=theme.TABLE_VALUE)
    table.add_column("Depends on", style=theme.TABLE_LABEL)
    table.add_column("Outputs", style=theme.TABLE_LABEL)

    for index, task_id in enumerate(graph.order, 1):
        node = graph.get(task_id)
        table.add_row(
            str(index),
            task_id,
            node.action.toolchain,
            ", ".join(sorted(graph.dependencies_of(task_id))) or "-",
            "\n".join(node.outputs) or "-",
        )
    console.print(table)
