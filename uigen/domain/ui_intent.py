"""Structured description of a screen, derived from a request before prompting."""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ColumnIntent:
    name: str
    label: str
    ui_type: str = "input"
    data_type: str = "string"
    required: bool = False
    primary_key: bool = False
    max_length: Optional[int] = None

    def describe(self) -> str:
        extras = ", required" if self.required else ""
        if self.primary_key:
            extras += ", key"
        return f"{self.name} ({self.label}, {self.ui_type}, {self.data_type}{extras})"


@dataclass(frozen=True)
class DatasetIntent:
    dataset_id: str
    table: Optional[str] = None
    columns: Tuple[ColumnIntent, ...] = ()
    references: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GridIntent:
    grid_id: str
    dataset_id: str
    headers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ActionIntent:
    action_id: str
    label: str

    @property
    def function_name(self) -> str:
        return f"fn_{self.action_id}"


DEFAULT_ACTIONS = {
    "list": (("search", "Search"), ("add", "New"), ("delete", "Delete")),
    "detail": (("save", "Save"), ("delete", "Delete")),
    "popup": (("save", "Save"), ("close", "Close")),
    "list_with_popup": (("search", "Search"), ("add", "New"), ("delete", "Delete")),
}


def default_actions(screen_type: str) -> Tuple[ActionIntent, ...]:
    return tuple(
        ActionIntent(action_id, label)
        for action_id, label in DEFAULT_ACTIONS.get(screen_type, DEFAULT_ACTIONS["list"])
    )


@dataclass(frozen=True)
class UiIntent:
    """What the screen should contain, independent of how it was requested.

    ``describe()`` renders the intent as the text the model is asked to
    implement; the ``*_text`` helpers fill the matching template placeholders.
    """

    screen_name: str
    screen_type: str
    datasets: Tuple[DatasetIntent, ...] = ()
    grids: Tuple[GridIntent, ...] = ()
    actions: Tuple[ActionIntent, ...] = ()
    notes: Optional[str] = None

    def describe(self) -> str:
        lines = [f"Create a {self.screen_type} screen named '{self.screen_name}'."]

        if self.datasets:
            lines.extend(["", "Datasets:"])
            for ds in self.datasets:
                lines.append(f"- {ds.dataset_id} (table: {ds.table or 'unknown'})")
                if ds.columns:
                    lines.append("  Columns:")
                    lines.extend(f"    - {column.describe()}" for column in ds.columns)
                lines.extend(f"  References: {ref}" for ref in ds.references)

        if self.grids:
            lines.extend(["", "Grids:"])
            for grid in self.grids:
                lines.append(f"- {grid.grid_id} (bound to {grid.dataset_id})")
                if grid.headers:
                    lines.append(f"  Columns: {', '.join(grid.headers)}")

        if self.actions:
            lines.extend(["", "Actions:"])
            lines.extend(f"- {a.action_id} ({a.label}): {a.function_name}" for a in self.actions)

        if self.notes:
            lines.extend(["", "Notes:", self.notes])
        return "\n".join(lines)

    def datasets_text(self) -> str:
        return "; ".join(
            f"{ds.dataset_id} [{', '.join(c.name for c in ds.columns)}]" for ds in self.datasets
        )

    def grid_columns_text(self) -> str:
        return "; ".join(f"{g.grid_id}: {', '.join(g.headers)}" for g in self.grids)

    def actions_text(self) -> str:
        return ", ".join(f"{a.label} ({a.function_name})" for a in self.actions)
