"""Turns a generation request into a UiIntent before the prompt is compiled.

``natural-language`` requests carry free text. ``db-schema`` requests carry a
JSON table description::

    {"table": "member", "columns": [{"name": "id", "column_type": "INTEGER", "pk": true}],
     "primary_keys": ["id"], "foreign_keys": [{"column": "dept_id", "ref_table": "dept",
     "ref_column": "id"}]}

``query-sample`` requests carry a SELECT statement, either as plain SQL or as
``{"query": "...", "description": "...", "result_columns": [...]}``.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from uigen.application.services.exceptions import InvalidInput
from uigen.domain.models import GenerationRequest
from uigen.domain.ui_intent import (
    ColumnIntent,
    DatasetIntent,
    GridIntent,
    UiIntent,
    default_actions,
)

logger = logging.getLogger(__name__)

LABELS = {
    "id": "ID",
    "nm": "Name",
    "tel": "Phone",
    "addr": "Address",
    "reg_dt": "Registered",
    "reg_date": "Registered",
    "mod_dt": "Modified",
    "mod_date": "Modified",
    "use_yn": "In Use",
    "del_yn": "Deleted",
    "amt": "Amount",
    "qty": "Quantity",
}

ENTITY_KEYWORDS = (
    (("member", "user", "account"), "member"),
    (("order", "purchase"), "order"),
    (("product", "item", "goods"), "product"),
    (("board", "post", "article"), "board"),
    (("customer", "client"), "customer"),
    (("employee", "staff"), "employee"),
    (("department", "dept"), "department"),
    (("task", "todo"), "task"),
    (("schedule", "calendar", "event"), "schedule"),
    (("reservation", "booking"), "reservation"),
    (("payment", "transaction"), "payment"),
    (("invoice", "bill"), "invoice"),
    (("inventory", "stock"), "inventory"),
    (("notice", "announcement"), "notice"),
    (("inquiry", "question"), "inquiry"),
)

LENGTH_RE = re.compile(r"\(\s*(\d+)")
FROM_RE = re.compile(r"\bfrom\s+([^\s,;()]+)", re.IGNORECASE)
SELECT_RE = re.compile(r"\bselect\s+(?:distinct\s+)?(.*?)\s+from\b", re.IGNORECASE | re.DOTALL)
QUOTES = "\"'`[]"


def humanize(name: str) -> str:
    return " ".join(word.capitalize() for word in name.replace("_", " ").split())


def infer_label(name: str, comment: Any = None) -> str:
    if isinstance(comment, str) and comment.strip():
        return comment.strip()
    return LABELS.get(name.lower(), humanize(name))


def column_length(db_type: str) -> Optional[int]:
    match = LENGTH_RE.search(db_type)
    return int(match.group(1)) if match else None


def infer_types(db_type: str, primary_key: bool = False) -> Tuple[str, str]:
    """Map a database column type to a (ui_type, data_type) pair."""
    if primary_key:
        return "hidden", "integer"

    upper = db_type.strip().upper()
    if upper.startswith(("VARCHAR", "CHAR", "NVARCHAR", "NCHAR")):
        return ("textarea" if (column_length(upper) or 255) > 500 else "input"), "string"
    if upper.startswith(("TEXT", "CLOB", "LONGTEXT")):
        return "textarea", "text"
    if upper == "DATE":
        return "datepicker", "date"
    if upper.startswith(("DATETIME", "TIMESTAMP")):
        return "datetimepicker", "datetime"
    if upper in ("BOOLEAN", "BOOL", "BIT"):
        return "checkbox", "boolean"
    if upper.startswith(("INT", "BIGINT", "SMALLINT", "TINYINT")):
        return "number", "integer"
    if upper.startswith(("DECIMAL", "NUMERIC", "NUMBER")) or upper in ("FLOAT", "DOUBLE", "REAL"):
        return "number", "decimal"
    if upper.startswith("BLOB") or upper in ("BINARY", "VARBINARY"):
        return "file", "binary"
    return "input", "string"


def infer_screen_name(description: str, screen_type: str = "list") -> str:
    lower = description.lower()
    suffix = "detail" if screen_type in ("detail", "popup") else "list"
    for keywords, entity in ENTITY_KEYWORDS:
        if any(re.search(rf"\b{keyword}", lower) for keyword in keywords):
            return f"{entity}_{suffix}"
    return f"screen_{suffix}"


class InputNormalizer:
    """Builds a UiIntent from any supported input type."""

    def normalize(self, request: GenerationRequest) -> UiIntent:
        """Normalize a request.

        Raises:
            InvalidInput: If a schema or query sample cannot be understood
        """
        if request.input_type == "db-schema":
            intent = self.from_schema(self._json_object(request.intent), request.screen_type)
        elif request.input_type == "query-sample":
            intent = self.from_query(request.intent, request.screen_type)
        else:
            intent = UiIntent(
                screen_name=infer_screen_name(request.intent, request.screen_type),
                screen_type=request.screen_type,
                actions=default_actions(request.screen_type),
                notes=request.intent.strip(),
            )
        logger.debug(
            f"Normalized {request.input_type} input to {intent.screen_name} "
            f"({len(intent.datasets)} dataset(s))"
        )
        return intent

    def from_schema(self, schema: Dict[str, Any], screen_type: str = "list") -> UiIntent:
        table = schema.get("table")
        if not isinstance(table, str) or not table.strip():
            raise InvalidInput("Schema input needs a 'table' name")
        table = table.strip()
        primary_keys = set(self._names(schema.get("primary_keys", []), "primary_keys"))

        columns = []
        for raw in self._list(schema.get("columns", []), "columns"):
            name = self._column_name(raw)
            db_type = str(raw.get("column_type") or raw.get("type") or "VARCHAR")
            is_key = bool(raw.get("pk")) or name in primary_keys
            ui_type, data_type = infer_types(db_type, is_key)
            columns.append(
                ColumnIntent(
                    name=name,
                    label=infer_label(name, raw.get("comment")),
                    ui_type=ui_type,
                    data_type=data_type,
                    required=not is_key and raw.get("nullable") is False,
                    primary_key=is_key,
                    max_length=column_length(db_type),
                )
            )
        if not columns:
            raise InvalidInput(f"Schema input for table '{table}' has no columns")

        references = []
        for fk in self._list(schema.get("foreign_keys", []), "foreign_keys"):
            try:
                references.append(f"{fk['column']} -> {fk['ref_table']}.{fk['ref_column']}")
            except KeyError as e:
                raise InvalidInput(f"Foreign key is missing {e}") from e

        return self._list_intent(table, columns, screen_type, references=references)

    def from_query(self, text: str, screen_type: str = "list") -> UiIntent:
        description = None
        result_columns: Optional[List[Dict[str, Any]]] = None
        query = text
        if text.lstrip().startswith("{"):
            data = self._json_object(text)
            query = data.get("query")
            if not isinstance(query, str) or not query.strip():
                raise InvalidInput("Query sample input needs a 'query'")
            if isinstance(data.get("description"), str):
                description = data["description"].strip() or None
            if data.get("result_columns") is not None:
                result_columns = self._list(data["result_columns"], "result_columns")

        from_match = FROM_RE.search(query)
        if from_match is None:
            raise InvalidInput("Could not find a FROM clause in the query sample")
        table = from_match.group(1).split(".")[-1].strip(QUOTES)

        if result_columns is not None:
            columns = []
            for raw in result_columns:
                name = self._column_name(raw)
                ui_type, data_type = infer_types(str(raw.get("column_type") or "VARCHAR"))
                columns.append(
                    ColumnIntent(
                        name=name,
                        label=infer_label(name, raw.get("label")),
                        ui_type=ui_type,
                        data_type=data_type,
                    )
                )
        else:
            columns = [
                ColumnIntent(name=name, label=infer_label(name))
                for name in self.select_columns(query)
            ]
        if not columns:
            raise InvalidInput("No columns found in the query sample")

        return self._list_intent(table, columns, screen_type, notes=description)

    @staticmethod
    def select_columns(query: str) -> List[str]:
        """Output column names of a SELECT, aliases preferred."""
        match = SELECT_RE.search(query)
        if match is None:
            raise InvalidInput("Could not find a SELECT clause in the query sample")
        clause = match.group(1).strip()
        if clause == "*":
            raise InvalidInput("SELECT * needs result_columns to be provided")

        names = []
        for expression in split_select_list(clause):
            parts = expression.split()
            if len(parts) >= 3 and parts[-2].upper() == "AS":
                name = parts[-1]
            elif len(parts) >= 2 and parts[-1].upper() not in ("AND", "OR"):
                name = parts[-1]
            else:
                name = parts[0].split(".")[-1]
            names.append(name.strip(QUOTES))
        return [n for n in names if n]

    def _list_intent(
        self,
        table: str,
        columns: Sequence[ColumnIntent],
        screen_type: str,
        references: Sequence[str] = (),
        notes: Optional[str] = None,
    ) -> UiIntent:
        key = table.lower()
        dataset_id = f"ds_{key}"
        suffix = "detail" if screen_type in ("detail", "popup") else "list"
        return UiIntent(
            screen_name=f"{key}_{suffix}",
            screen_type=screen_type,
            datasets=(
                DatasetIntent(
                    dataset_id=dataset_id,
                    table=table,
                    columns=tuple(columns),
                    references=tuple(references),
                ),
            ),
            grids=(
                GridIntent(
                    grid_id=f"grid_{key}",
                    dataset_id=dataset_id,
                    headers=tuple(c.label for c in columns if c.ui_type != "hidden"),
                ),
            ),
            actions=default_actions(screen_type),
            notes=notes,
        )

    @staticmethod
    def _json_object(text: str) -> Dict[str, Any]:
        try:
            data = json.loads(text)
        except ValueError as e:
            raise InvalidInput(f"Input is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise InvalidInput("Input must be a JSON object")
        return data

    @staticmethod
    def _list(value: Any, key: str) -> List[Dict[str, Any]]:
        if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
            raise InvalidInput(f"'{key}' must be a list of objects")
        return value

    @staticmethod
    def _names(value: Any, key: str) -> List[str]:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise InvalidInput(f"'{key}' must be a list of names")
        return value

    @staticmethod
    def _column_name(raw: Dict[str, Any]) -> str:
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput("Every column needs a 'name'")
        return name.strip()


def split_select_list(clause: str) -> List[str]:
    """Split a SELECT list on top-level commas."""
    parts, depth, current = [], 0, []
    for ch in clause:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]
