"""Owner-scoped table access.

One ``OwnedRepository`` class serves every entity; a ``TableSpec`` says
which model it wraps, which fields a form may write, how lists are ordered
and which fields the search covers. Repositories are built from a
``SessionContext`` and only ever see rows whose owner column equals the
context's principal. A row owned by someone else looks exactly like a row
that does not exist.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from okfees import db
from okfees.models import (Announcement, Event, FeePayment, InstituteInfo, LiveClass, Profile, Student,
                           StudentSummary, TopperStudent)
from okfees.models.blog import DEFAULT_INSTITUTE, DEFAULT_STUDENT_SUMMARY
from okfees.session import SessionContext


class DataServiceError(Exception):
    """A read or write against the database failed."""

    def __init__(self, operation: str, entity: str, detail: Optional[str] = None):
        super().__init__(f'Failed to {operation} {entity}' + (f': {detail}' if detail else ''))
        self.operation = operation
        self.entity = entity
        self.detail = detail


class RowNotFound(Exception):
    def __init__(self, entity: str, row_id: Any = None):
        super().__init__(f'{entity} {row_id} not found' if row_id is not None else f'{entity} not found')
        self.entity = entity
        self.row_id = row_id


class LimitReached(Exception):
    def __init__(self, entity: str, limit: int):
        super().__init__(f'You can only add up to {limit} {entity}')
        self.entity = entity
        self.limit = limit


@dataclass(frozen=True)
class TableSpec:
    model: Any
    entity: str
    editable: Tuple[str, ...]
    order: Tuple[Tuple[str, bool], ...] = (('created_at', True),)
    search_fields: Tuple[str, ...] = ()
    defaults: Dict[str, Any] = field(default_factory=dict)
    owner_field: str = 'user_id'
    # config key holding the soft cap on rows per owner
    limit_setting: Optional[str] = None
    # field -> model whose row must belong to the same owner
    references: Dict[str, Any] = field(default_factory=dict)
    joined: Tuple[str, ...] = ()


STUDENTS = TableSpec(
    model=Student,
    entity='students',
    editable=('name', 'email', 'phone', 'batch', 'fee_amount', 'fee_paid', 'status', 'enrollment_date'),
    search_fields=('name', 'student_code', 'email', 'batch'),
    defaults={'fee_paid': 0, 'status': 'active', 'enrollment_date': date.today},
)

FEE_PAYMENTS = TableSpec(
    model=FeePayment,
    entity='fee payments',
    editable=('student_id', 'month', 'year', 'amount_paid', 'payment_date', 'payment_method', 'notes'),
    order=(('year', True), ('month', True)),
    defaults={'amount_paid': 0, 'payment_date': date.today},
    references={'student_id': Student},
    joined=('student',),
)

ANNOUNCEMENTS = TableSpec(
    model=Announcement,
    entity='announcements',
    editable=('title', 'content', 'media_url', 'media_type', 'batch'),
    search_fields=('title', 'content', 'batch'),
    defaults={'media_type': 'none'},
)

EVENTS = TableSpec(
    model=Event,
    entity='events',
    editable=('title', 'description', 'image_url'),
    limit_setting='EVENT_LIMIT',
)

LIVE_CLASSES = TableSpec(
    model=LiveClass,
    entity='live classes',
    editable=('class_name', 'subject', 'start_date', 'timing', 'fee', 'teacher_name', 'teacher_image_url'),
    order=(('start_date', False),),
    defaults={'fee': 0},
)

TOPPER_STUDENTS = TableSpec(
    model=TopperStudent,
    entity='topper students',
    editable=('name', 'class_name', 'marks', 'image_url'),
    limit_setting='TOPPER_LIMIT',
)

INSTITUTE_INFO = TableSpec(
    model=InstituteInfo,
    entity='institute information',
    editable=('name', 'location', 'description', 'teacher_names', 'map_link', 'hero_image_url'),
    defaults=DEFAULT_INSTITUTE,
)

STUDENT_SUMMARY = TableSpec(
    model=StudentSummary,
    entity='student summary',
    editable=('summary',),
    defaults={'summary': DEFAULT_STUDENT_SUMMARY},
)

PROFILES = TableSpec(
    model=Profile,
    entity='profile',
    editable=('full_name', 'institute_name', 'phone', 'whatsapp_number', 'whatsapp_group_link'),
    owner_field='id',
)


def _fail(operation: str, entity: str, error: Exception) -> DataServiceError:
    db.session.rollback()
    current_app.logger.error(f'Error during {operation} on {entity}: {str(error)}')
    return DataServiceError(operation, entity, str(error))


class OwnedRepository:
    """list/get/insert/update/delete for one entity, scoped to one principal."""

    def __init__(self, ctx: SessionContext, spec: TableSpec):
        self.ctx = ctx
        self.spec = spec
        self.model = spec.model

    @property
    def owner_column(self):
        return getattr(self.model, self.spec.owner_field)

    @property
    def limit(self) -> Optional[int]:
        if not self.spec.limit_setting:
            return None
        return current_app.config.get(self.spec.limit_setting)

    def _query(self):
        self.ctx.require_active()
        query = self.model.query.filter(self.owner_column == self.ctx.owner_id)
        for relation in self.spec.joined:
            query = query.options(joinedload(getattr(self.model, relation)))
        return query

    def _ordered(self, query):
        clauses = []
        for name, descending in self.spec.order:
            column = getattr(self.model, name)
            clauses.append(column.desc() if descending else column.asc())
        # Ties fall back to insertion order in the same direction as the primary sort
        if self.spec.order and self.spec.order[0][1]:
            clauses.append(self.model.id.desc())
        else:
            clauses.append(self.model.id.asc())
        return query.order_by(*clauses)

    def _search(self, query, term: str, fields: Optional[Tuple[str, ...]] = None):
        like = f'%{term}%'
        names = fields or self.spec.search_fields
        return query.filter(or_(*[getattr(self.model, name).ilike(like) for name in names]))

    def list(self, limit: Optional[int] = None, term: Optional[str] = None,
             fields: Optional[Tuple[str, ...]] = None) -> List[Any]:
        try:
            query = self._ordered(self._query())
            if term:
                query = self._search(query, term, fields)
            if limit:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            raise _fail('fetch', self.spec.entity, e)

    def count(self) -> int:
        try:
            return self._query().count()
        except SQLAlchemyError as e:
            raise _fail('count', self.spec.entity, e)

    def can_create(self) -> bool:
        limit = self.limit
        return limit is None or self.count() < limit

    def get(self, row_id: Any):
        try:
            row = self._query().filter(self.model.id == row_id).first()
        except SQLAlchemyError as e:
            raise _fail('fetch', self.spec.entity, e)
        if row is None:
            raise RowNotFound(self.spec.entity, row_id)
        return row

    def find_one(self, term: str, fields: Optional[Tuple[str, ...]] = None):
        """First row whose search fields contain ``term``."""
        rows = self.list(limit=1, term=term, fields=fields)
        if not rows:
            raise RowNotFound(self.spec.entity)
        return rows[0]

    def _values(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        values = {}
        for name in self.spec.editable:
            value = fields.get(name)
            if value is None and name in self.spec.defaults:
                value = self.spec.defaults[name]
                if callable(value):
                    value = value()
            values[name] = value
        return values

    def _check_references(self, values: Dict[str, Any]) -> None:
        for name, model in self.spec.references.items():
            ref_id = values.get(name)
            ref = model.query.filter(model.id == ref_id, model.user_id == self.ctx.owner_id).first()
            if ref is None:
                raise RowNotFound(model.__tablename__, ref_id)

    def insert(self, fields: Dict[str, Any]):
        limit = self.limit
        if limit is not None and self.count() >= limit:
            current_app.logger.warning(f'{self.spec.entity} limit of {limit} reached for principal {self.ctx.owner_id}')
            raise LimitReached(self.spec.entity, limit)

        values = self._values(fields)
        try:
            self._check_references(values)
            row = self.model(**values)
            setattr(row, self.spec.owner_field, self.ctx.owner_id)
            db.session.add(row)
            db.session.commit()
            return row
        except SQLAlchemyError as e:
            raise _fail('create', self.spec.entity, e)

    def update(self, row_id: Any, fields: Dict[str, Any]):
        row = self.get(row_id)
        values = self._values(fields)
        try:
            self._check_references(values)
            for name, value in values.items():
                setattr(row, name, value)
            db.session.commit()
            return row
        except SQLAlchemyError as e:
            raise _fail('update', self.spec.entity, e)

    def delete(self, row_id: Any) -> None:
        row = self.get(row_id)
        try:
            db.session.delete(row)
            db.session.commit()
        except SQLAlchemyError as e:
            raise _fail('delete', self.spec.entity, e)


class SingletonRepository(OwnedRepository):
    """One row per owner, created with default content on first read."""

    def get_or_create(self):
        try:
            row = self._query().first()
            if row is None:
                row = self.model(**dict(self.spec.defaults))
                setattr(row, self.spec.owner_field, self.ctx.owner_id)
                db.session.add(row)
                db.session.commit()
                current_app.logger.info(f'Created default {self.spec.entity} for principal {self.ctx.owner_id}')
            return row
        except SQLAlchemyError as e:
            raise _fail('fetch', self.spec.entity, e)

    def save(self, fields: Dict[str, Any]):
        row = self.get_or_create()
        return self.update(row.id, fields)


class ProfileRepository(OwnedRepository):
    """The principal's own profile row (its id is the principal id)."""

    def __init__(self, ctx: SessionContext):
        super().__init__(ctx, PROFILES)

    def get_or_create(self):
        try:
            row = self._query().first()
            if row is None:
                row = Profile(id=self.ctx.owner_id, email=self.ctx.email or '')
                db.session.add(row)
                db.session.commit()
            return row
        except SQLAlchemyError as e:
            raise _fail('fetch', self.spec.entity, e)

    def save(self, fields: Dict[str, Any], only: Optional[Tuple[str, ...]] = None):
        """Replace the given editable fields (all of them unless ``only`` narrows it)."""
        row = self.get_or_create()
        names = only or self.spec.editable
        try:
            for name in names:
                setattr(row, name, fields.get(name))
            db.session.commit()
            return row
        except SQLAlchemyError as e:
            raise _fail('update', self.spec.entity, e)


def students(ctx):
    return OwnedRepository(ctx, STUDENTS)


def fee_payments(ctx):
    return OwnedRepository(ctx, FEE_PAYMENTS)


def announcements(ctx):
    return OwnedRepository(ctx, ANNOUNCEMENTS)


def events(ctx):
    return OwnedRepository(ctx, EVENTS)


def live_classes(ctx):
    return OwnedRepository(ctx, LIVE_CLASSES)


def topper_students(ctx):
    return OwnedRepository(ctx, TOPPER_STUDENTS)


def institute_info(ctx):
    return SingletonRepository(ctx, INSTITUTE_INFO)


def student_summary(ctx):
    return SingletonRepository(ctx, STUDENT_SUMMARY)


def profiles(ctx):
    return ProfileRepository(ctx)


def latest_announcements(ctx: SessionContext, limit: int, scope: str = 'owner') -> List[Announcement]:
    """Newest announcements for the notification feed."""
    if scope != 'all':
        return announcements(ctx).list(limit=limit)
    ctx.require_active()
    try:
        return (Announcement.query
                .order_by(Announcement.created_at.desc(), Announcement.id.desc())
                .limit(limit)
                .all())
    except SQLAlchemyError as e:
        raise _fail('fetch', 'announcements', e)


def find_student_publicly(term: str) -> Student:
    """Public lookup by code or name across every institute."""
    like = f'%{term}%'
    try:
        student = (Student.query
                   .filter(or_(Student.student_code.ilike(like), Student.name.ilike(like)))
                   .order_by(Student.id.asc())
                   .first())
    except SQLAlchemyError as e:
        raise _fail('search', 'students', e)
    if student is None:
        raise RowNotFound('students')
    return student
