"""Draft handling for the create/edit dialogs.

A ``FormController`` keeps the draft for one form. ``seed`` loads a row for
editing and ``clear`` resets to an empty create form. ``submit`` coerces and
checks the draft and hands it to the repository call. On success the draft is
cleared and the screen's refetch runs; on failure the draft is kept so the
user can retry.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple


class FormValidationError(Exception):
    def __init__(self, errors: Dict[str, str]):
        super().__init__('; '.join(f'{name}: {message}' for name, message in errors.items()))
        self.errors = errors


class FormBusy(Exception):
    pass


class RefetchFailed(Exception):
    """The submit went through but the screen's refetch raised."""

    def __init__(self, result: Any, cause: Exception):
        super().__init__(f'Saved, but reloading failed: {cause}')
        self.result = result
        self.cause = cause


@dataclass(frozen=True)
class Field:
    name: str
    kind: str = 'str'  # str, text, float, int, date, choice
    required: bool = False
    choices: Tuple[str, ...] = ()
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    def coerce(self, raw: Any) -> Any:
        if raw is None:
            return None
        if isinstance(raw, str):
            raw = raw.strip()
            if raw == '':
                return None
        if self.kind in ('str', 'text'):
            return str(raw)
        if self.kind == 'float':
            value = float(raw)
            if not math.isfinite(value):
                raise ValueError('must be a number')
        elif self.kind == 'int':
            value = int(raw)
        elif self.kind == 'date':
            if isinstance(raw, datetime):
                return raw.date()
            if isinstance(raw, date):
                return raw
            return datetime.strptime(str(raw)[:10], '%Y-%m-%d').date()
        elif self.kind == 'choice':
            value = str(raw)
            if value not in self.choices:
                raise ValueError(f"must be one of {', '.join(self.choices)}")
            return value
        else:
            raise ValueError(f'unknown field kind {self.kind}')

        if self.min_value is not None and value < self.min_value:
            raise ValueError(f'must be at least {self.min_value:g}')
        if self.max_value is not None and value > self.max_value:
            raise ValueError(f'must be at most {self.max_value:g}')
        return value


class FormSchema:
    def __init__(self, name: str, fields: Sequence[Field]):
        self.name = name
        self.fields = list(fields)

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def empty(self) -> Dict[str, Any]:
        return {f.name: '' for f in self.fields}

    def clean(self, draft: Dict[str, Any]) -> Dict[str, Any]:
        values, errors = {}, {}
        for f in self.fields:
            try:
                value = f.coerce(draft.get(f.name))
            except (TypeError, ValueError) as e:
                errors[f.name] = str(e) if str(e) else 'is invalid'
                continue
            if value is None and f.required:
                errors[f.name] = 'is required'
                continue
            values[f.name] = value
        if errors:
            raise FormValidationError(errors)
        return values


class FormController:
    def __init__(self, schema: FormSchema, on_submit: Callable[[Dict[str, Any]], Any],
                 on_success: Optional[Callable[[Any], Any]] = None):
        self.schema = schema
        self.on_submit = on_submit
        self.on_success = on_success
        self.draft: Dict[str, Any] = schema.empty()
        self.busy = False
        self.refreshed: Any = None

    @property
    def busy_label(self) -> Optional[str]:
        return 'Saving...' if self.busy else None

    def seed(self, row: Any) -> 'FormController':
        """Load an existing row into the draft for editing."""
        self.draft = self.schema.empty()
        for name in self.schema.field_names:
            value = row.get(name) if isinstance(row, dict) else getattr(row, name, None)
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            self.draft[name] = '' if value is None else value
        return self

    def update(self, data: Dict[str, Any]) -> 'FormController':
        for name in self.schema.field_names:
            if name in data:
                self.draft[name] = data[name]
        return self

    def clear(self) -> None:
        self.draft = self.schema.empty()

    def validate(self) -> Dict[str, Any]:
        return self.schema.clean(self.draft)

    def submit(self) -> Any:
        if self.busy:
            raise FormBusy(f'{self.schema.name} is already being saved')
        self.busy = True
        try:
            values = self.validate()
            result = self.on_submit(values)
        finally:
            self.busy = False
        self.clear()
        if self.on_success is not None:
            try:
                self.refreshed = self.on_success(result)
            except Exception as e:
                raise RefetchFailed(result, e) from e
        return result
