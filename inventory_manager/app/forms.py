# app/forms.py
from datetime import date, datetime
from decimal import Decimal

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import (StringField, TextAreaField, IntegerField, DecimalField, BooleanField,
                     DateField, DateTimeField, PasswordField)
from wtforms.fields.core import UnboundField
from wtforms.validators import (DataRequired, InputRequired, Optional, Length, NumberRange,
                                AnyOf, Regexp, ValidationError)

from inventory_manager.app.errors import ValidationFailed, UniquenessConflict
from inventory_manager.app.models import (db, User, Item, Category, Location, ItemStatus,
                                          ItemCondition, AssignmentStatus, ReturnCondition,
                                          DisposalReason, DisposalMethod, MaintenanceType,
                                          MaintenancePriority, RequestType,
                                          RequestPriority)
from inventory_manager.app.models.catalog import normalize_code
from inventory_manager.app.models.mixins import enum_values, utcnow

DATETIME_FORMATS = ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S', '%Y-%m-%dT%H:%M', '%Y-%m-%d']


def _choices(enum_cls, message=None):
    values = enum_values(enum_cls)
    return AnyOf(values, message=message or f"Must be one of: {', '.join(values)}.")


class Unique:
    """Value must not be taken by another row; the form's record_id is excluded.

    With ``live_only`` soft-deleted rows do not hold on to their values.
    """

    def __init__(self, model, column, message=None, normalize=None, live_only=False):
        self.model = model
        self.column = column
        self.message = message
        self.normalize = normalize
        self.live_only = live_only

    def __call__(self, form, field):
        value = field.data
        if isinstance(value, str):
            value = value.strip()
        if value in (None, ''):
            return
        if self.normalize:
            value = self.normalize(value)
        query = self.model.live() if self.live_only else self.model.query
        query = query.filter(getattr(self.model, self.column) == value)
        if form.record_id is not None:
            query = query.filter(self.model.id != form.record_id)
        if db.session.query(query.exists()).scalar():
            form.conflicts.add(field.name)
            raise ValidationError(self.message or f'The {field.label.text.lower()} has already been taken.')


class Exists:
    """Foreign key must resolve to a live row"""

    def __init__(self, model, message=None):
        self.model = model
        self.message = message

    def __call__(self, form, field):
        if field.data is None:
            return
        record = db.session.get(self.model, field.data)
        if record is None or getattr(record, 'deleted_at', None) is not None:
            raise ValidationError(self.message or f'The selected {field.label.text.lower()} is invalid.')


class After:
    """Date must be strictly after another field's date when both are present"""

    def __init__(self, other, message=None):
        self.other = other
        self.message = message

    def __call__(self, form, field):
        other = form[self.other].data
        if field.data is None or other is None:
            return
        if not field.data > other:
            raise ValidationError(self.message or
                                  f'Must be a date after {form[self.other].label.text.lower()}.')


class Future:
    """Date or datetime must be strictly after the moment of submission"""

    def __init__(self, message=None):
        self.message = message

    def __call__(self, form, field):
        if field.data is None:
            return
        if isinstance(field.data, datetime):
            ok = field.data > utcnow()
        else:
            ok = field.data > date.today()
        if not ok:
            raise ValidationError(self.message or 'Must be a date in the future.')


class PayloadForm(FlaskForm):
    """A form fed from a JSON payload instead of a posted HTML form"""

    class Meta:
        csrf = False

    def __init__(self, *args, record_id=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.record_id = record_id
        self.conflicts = set()


def field_names(form_class):
    return [name for name in dir(form_class) if isinstance(getattr(form_class, name), UnboundField)]


def to_formdata(payload):
    formdata = MultiDict()
    for key, value in (payload or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        elif isinstance(value, datetime):
            value = value.strftime('%Y-%m-%dT%H:%M:%S')
        elif isinstance(value, date):
            value = value.isoformat()
        elif isinstance(value, (int, float, Decimal)):
            value = str(value)
        elif isinstance(value, (list, dict)):
            continue
        formdata.add(key, value)
    return formdata


def validate_payload(form_class, payload, record_id=None):
    """Run a form contract over a payload.

    Returns the cleaned values of the fields present in the payload. Every
    violation is reported at once; a failure made only of uniqueness
    collisions is a UniquenessConflict, anything else is ValidationFailed.
    """
    formdata = to_formdata(payload)
    form = form_class(formdata=formdata, record_id=record_id)
    if not form.validate():
        errors = {name: list(messages) for name, messages in form.errors.items()}
        if form.conflicts and set(errors) <= form.conflicts:
            raise UniquenessConflict(errors)
        raise ValidationFailed(errors)
    data = {}
    for name, field in form._fields.items():
        if name not in formdata:
            continue
        value = field.data
        if isinstance(value, str):
            value = value.strip() or None
        data[name] = value
    return data


# Auth

class LoginForm(PayloadForm):
    email = StringField('Email', validators=[DataRequired(), Length(max=120)])
    password = PasswordField('Password', validators=[DataRequired()])
    remember = BooleanField('Remember Me')


# Users

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class UserForm(PayloadForm):
    username = StringField('Username', validators=[
        DataRequired(), Length(min=2, max=80), Unique(User, 'username')])
    email = StringField('Email', validators=[
        DataRequired(), Length(max=120), Regexp(EMAIL_PATTERN, message='Invalid email address.'),
        Unique(User, 'email', normalize=str.lower)])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=8)])
    role = StringField('Role', validators=[DataRequired(), Length(max=50)])


class UserUpdateForm(PayloadForm):
    username = StringField('Username', validators=[
        Optional(), Length(min=2, max=80), Unique(User, 'username')])
    email = StringField('Email', validators=[
        Optional(), Length(max=120), Regexp(EMAIL_PATTERN, message='Invalid email address.'),
        Unique(User, 'email', normalize=str.lower)])
    password = PasswordField('Password', validators=[Optional(), Length(min=8)])


class RoleForm(PayloadForm):
    role = StringField('Role', validators=[DataRequired(), Length(max=50)])


# Items and catalog

class ItemForm(PayloadForm):
    property_number = StringField('Property number', validators=[
        DataRequired(), Length(max=255), Unique(Item, 'property_number')])
    iar_number = StringField('IAR number', validators=[Optional(), Length(max=100)])
    fund_cluster = StringField('Fund cluster', validators=[Optional(), Length(max=100)])
    name = StringField('Name', validators=[DataRequired(), Length(max=255)])
    description = TextAreaField('Description', validators=[Optional(), Length(max=5000)])
    brand = StringField('Brand', validators=[Optional(), Length(max=255)])
    model = StringField('Model', validators=[Optional(), Length(max=255)])
    serial_number = StringField('Serial number', validators=[
        Optional(), Length(max=255), Unique(Item, 'serial_number')])
    barcode = StringField('Barcode', validators=[Optional(), Length(max=255), Unique(Item, 'barcode')])
    specifications = TextAreaField('Specifications', validators=[Optional()])
    acquisition_cost = DecimalField('Acquisition cost', validators=[InputRequired(), NumberRange(min=0)])
    unit_of_measure = StringField('Unit of measure', validators=[Optional(), Length(max=50)])
    quantity = IntegerField('Quantity', validators=[Optional(), NumberRange(min=1)])
    category_id = IntegerField('Category', validators=[Optional(), Exists(Category)])
    location_id = IntegerField('Location', validators=[Optional(), Exists(Location)])
    accountable_person_id = IntegerField('Accountable person', validators=[Optional(), Exists(User)])
    date_acquired = DateField('Date acquired', validators=[Optional()])
    date_inventoried = DateField('Date inventoried', validators=[Optional()])
    warranty_expiry = DateField('Warranty expiry', validators=[Optional(), After('date_acquired')])
    last_maintenance_date = DateField('Last maintenance date', validators=[Optional()])
    next_maintenance_due = DateField('Next maintenance due', validators=[
        Optional(), After('last_maintenance_date')])
    status = StringField('Status', validators=[Optional(), _choices(ItemStatus)])
    condition = StringField('Condition', validators=[Optional(), _choices(ItemCondition)])
    remarks = TextAreaField('Remarks', validators=[Optional(), Length(max=5000)])


class ItemStatusForm(PayloadForm):
    status = StringField('Status', validators=[DataRequired(), _choices(ItemStatus)])
    reason = TextAreaField('Reason', validators=[Optional(), Length(max=500)])


class CategoryForm(PayloadForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=255)])
    code = StringField('Code', validators=[
        DataRequired(), Length(max=50),
        Unique(Category, 'code', normalize=normalize_code, live_only=True)])
    description = TextAreaField('Description', validators=[Optional(), Length(max=1000)])
    is_active = BooleanField('Active')


class LocationForm(PayloadForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=255)])
    code = StringField('Code', validators=[
        DataRequired(), Length(max=50),
        Unique(Location, 'code', normalize=normalize_code, live_only=True)])
    building = StringField('Building', validators=[Optional(), Length(max=255)])
    floor = StringField('Floor', validators=[Optional(), Length(max=50)])
    room = StringField('Room', validators=[Optional(), Length(max=50)])
    description = TextAreaField('Description', validators=[Optional(), Length(max=1000)])
    is_active = BooleanField('Active')


# Assignments and returns

class AssignmentForm(PayloadForm):
    item_id = IntegerField('Item', validators=[InputRequired(), Exists(Item)])
    user_id = IntegerField('User', validators=[InputRequired(), Exists(User)])
    due_date = DateField('Due date', validators=[Optional(), Future()])
    status = StringField('Status', validators=[Optional(), AnyOf(
        [AssignmentStatus.PENDING.value, AssignmentStatus.ACTIVE.value],
        message='Must be one of: pending, active.')])
    purpose = StringField('Purpose', validators=[Optional(), Length(max=255)])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=1000)])
    admin_notes = TextAreaField('Admin notes', validators=[Optional(), Length(max=1000)])
    condition_on_assignment = StringField('Condition on assignment', validators=[
        Optional(), _choices(ReturnCondition)])


class AssignmentApprovalForm(PayloadForm):
    admin_notes = TextAreaField('Admin notes', validators=[Optional(), Length(max=1000)])


class AssignmentRejectionForm(PayloadForm):
    admin_notes = TextAreaField('Admin notes', validators=[
        DataRequired(message='Please provide a reason for rejecting this assignment.'),
        Length(max=1000)])


class ReturnForm(PayloadForm):
    return_date = DateTimeField('Return date', format=DATETIME_FORMATS, validators=[Optional()])
    condition_on_return = StringField('Condition on return', validators=[
        DataRequired(), _choices(ReturnCondition)])
    is_damaged = BooleanField('Damaged')
    damage_description = TextAreaField('Damage description', validators=[Optional(), Length(max=2000)])
    return_notes = TextAreaField('Return notes', validators=[Optional(), Length(max=2000)])

    def validate(self, extra_validators=None):
        valid = super().validate(extra_validators)
        if self.is_damaged.data and not (self.damage_description.data or '').strip():
            self.damage_description.errors.append('Please describe the damage.')
            valid = False
        return valid


class InspectionForm(PayloadForm):
    is_damaged = BooleanField('Damaged')
    damage_description = TextAreaField('Damage description', validators=[Optional(), Length(max=2000)])
    inspection_notes = TextAreaField('Inspection notes', validators=[Optional(), Length(max=2000)])
    item_condition = StringField('Item condition', validators=[Optional(), _choices(ItemCondition)])


class ReturnRejectionForm(PayloadForm):
    inspection_notes = TextAreaField('Inspection notes', validators=[
        DataRequired(message='Please provide a reason for rejecting this return.'),
        Length(max=2000)])


class PenaltyForm(PayloadForm):
    per_day = DecimalField('Penalty per day', validators=[Optional(), NumberRange(min=0)])


# Disposals

class DisposalForm(PayloadForm):
    item_id = IntegerField('Item', validators=[InputRequired(), Exists(Item)])
    reason = StringField('Reason', validators=[DataRequired(), _choices(DisposalReason)])
    description = TextAreaField('Description', validators=[DataRequired(), Length(min=10, max=5000)])
    estimated_value = DecimalField('Estimated value', validators=[Optional(), NumberRange(min=0)])
    disposal_method = StringField('Disposal method', validators=[Optional(), _choices(DisposalMethod)])
    recipient = StringField('Recipient', validators=[Optional(), Length(max=255)])
    scheduled_for = DateTimeField('Scheduled for', format=DATETIME_FORMATS,
                                  validators=[Optional(), Future()])


class DisposalUpdateForm(PayloadForm):
    reason = StringField('Reason', validators=[Optional(), _choices(DisposalReason)])
    description = TextAreaField('Description', validators=[Optional(), Length(min=10, max=5000)])
    estimated_value = DecimalField('Estimated value', validators=[Optional(), NumberRange(min=0)])
    disposal_method = StringField('Disposal method', validators=[Optional(), _choices(DisposalMethod)])
    recipient = StringField('Recipient', validators=[Optional(), Length(max=255)])
    scheduled_for = DateTimeField('Scheduled for', format=DATETIME_FORMATS,
                                  validators=[Optional(), Future()])


class DisposalApprovalForm(PayloadForm):
    approval_notes = TextAreaField('Approval notes', validators=[Optional(), Length(max=2000)])
    disposal_method = StringField('Disposal method', validators=[Optional(), _choices(DisposalMethod)])
    scheduled_for = DateTimeField('Scheduled for', format=DATETIME_FORMATS,
                                  validators=[Optional(), Future()])


class DisposalRejectionForm(PayloadForm):
    approval_notes = TextAreaField('Approval notes', validators=[
        DataRequired(message='Please provide a reason for rejecting this disposal.'),
        Length(max=2000)])


class DisposalExecutionForm(PayloadForm):
    execution_notes = TextAreaField('Execution notes', validators=[Optional(), Length(max=2000)])
    disposal_cost = DecimalField('Disposal cost', validators=[Optional(), NumberRange(min=0)])
    disposal_method = StringField('Disposal method', validators=[Optional(), _choices(DisposalMethod)])
    recipient = StringField('Recipient', validators=[Optional(), Length(max=255)])


# Maintenance

class MaintenanceForm(PayloadForm):
    item_id = IntegerField('Item', validators=[InputRequired(), Exists(Item)])
    maintenance_type = StringField('Maintenance type', validators=[
        DataRequired(), _choices(MaintenanceType)])
    priority = StringField('Priority', validators=[Optional(), _choices(MaintenancePriority)])
    title = StringField('Title', validators=[DataRequired(), Length(max=255)])
    description = TextAreaField('Description', validators=[DataRequired(), Length(max=5000)])
    issue_reported = TextAreaField('Issue reported', validators=[Optional(), Length(max=5000)])
    estimated_cost = DecimalField('Estimated cost', validators=[Optional(), NumberRange(min=0)])
    scheduled_date = DateTimeField('Scheduled date', format=DATETIME_FORMATS,
                                   validators=[Optional(), Future()])
    estimated_duration = IntegerField('Estimated duration', validators=[Optional(), NumberRange(min=1)])
    assigned_to = IntegerField('Assigned to', validators=[Optional(), Exists(User)])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=5000)])


class MaintenanceScheduleForm(PayloadForm):
    scheduled_date = DateTimeField('Scheduled date', format=DATETIME_FORMATS,
                                   validators=[InputRequired(), Future()])
    estimated_duration = IntegerField('Estimated duration', validators=[Optional(), NumberRange(min=1)])
    assigned_to = IntegerField('Assigned to', validators=[Optional(), Exists(User)])


class MaintenanceCompletionForm(PayloadForm):
    action_taken = TextAreaField('Action taken', validators=[Optional(), Length(max=5000)])
    recommendations = TextAreaField('Recommendations', validators=[Optional(), Length(max=5000)])
    actual_cost = DecimalField('Actual cost', validators=[Optional(), NumberRange(min=0)])
    item_status_after = StringField('Item status after', validators=[Optional(), _choices(ItemStatus)])
    item_condition_after = StringField('Item condition after', validators=[
        Optional(), _choices(ItemCondition)])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=5000)])


class MaintenanceCancelForm(PayloadForm):
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=5000)])


class MaintenanceAssignForm(PayloadForm):
    assigned_to = IntegerField('Assigned to', validators=[InputRequired(), Exists(User)])


class MaintenanceCostForm(PayloadForm):
    estimated_cost = DecimalField('Estimated cost', validators=[Optional(), NumberRange(min=0)])


# Requests

class RequestForm(PayloadForm):
    type = StringField('Type', validators=[DataRequired(), _choices(RequestType)])
    item_id = IntegerField('Item', validators=[Optional(), Exists(Item)])
    title = StringField('Title', validators=[DataRequired(), Length(max=255)])
    description = TextAreaField('Description', validators=[DataRequired(), Length(max=5000)])
    priority = StringField('Priority', validators=[Optional(), _choices(RequestPriority)])


class RequestEditForm(PayloadForm):
    type = StringField('Type', validators=[Optional(), _choices(RequestType)])
    item_id = IntegerField('Item', validators=[Optional(), Exists(Item)])
    title = StringField('Title', validators=[Optional(), Length(min=1, max=255)])
    description = TextAreaField('Description', validators=[Optional(), Length(min=1, max=5000)])
    priority = StringField('Priority', validators=[Optional(), _choices(RequestPriority)])


class RequestApprovalForm(PayloadForm):
    review_notes = TextAreaField('Review notes', validators=[Optional(), Length(max=2000)])
    auto_execute = BooleanField('Execute immediately')
    due_date = DateField('Due date', validators=[Optional(), Future()])


class RequestDecisionForm(PayloadForm):
    review_notes = TextAreaField('Review notes', validators=[
        DataRequired(message='Please provide a reason for your decision.'), Length(max=2000)])


class RequestCompletionForm(PayloadForm):
    due_date = DateField('Due date', validators=[Optional(), Future()])


class RequestCancelForm(PayloadForm):
    reason = TextAreaField('Reason', validators=[Optional(), Length(max=2000)])


class CommentForm(PayloadForm):
    comment = TextAreaField('Comment', validators=[DataRequired(), Length(max=5000)])
    is_internal = BooleanField('Internal')


class EmptyForm(PayloadForm):
    pass
