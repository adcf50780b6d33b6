# app/errors.py
from flask import jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.routing import RequestRedirect


class InventoryError(Exception):
    """Base class for domain errors surfaced to API callers"""
    status_code = 400
    kind = 'error'

    def __init__(self, message=None):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self):
        return {'error': self.kind, 'message': self.message}


class AuthorizationDenied(InventoryError):
    status_code = 403
    kind = 'forbidden'

    def __init__(self, permission=None, message=None):
        self.permission = permission
        super().__init__(message or (f'Missing permission: {permission}' if permission
                                     else 'You are not allowed to perform this action.'))


class InvalidTransition(InventoryError):
    status_code = 422
    kind = 'invalid_transition'

    def __init__(self, current, action, message=None):
        self.current = current
        self.action = action
        super().__init__(message or f"Cannot {action} while status is '{current}'.")

    def to_dict(self):
        body = super().to_dict()
        body.update(current_status=self.current, attempted_action=self.action)
        return body


class ValidationFailed(InventoryError):
    status_code = 422
    kind = 'validation_failed'

    def __init__(self, errors, message='The given data was invalid.'):
        super().__init__(message)
        self.errors = errors

    def to_dict(self):
        body = super().to_dict()
        body['errors'] = self.errors
        return body


class NotFound(InventoryError):
    status_code = 404
    kind = 'not_found'

    def __init__(self, model, ident=None):
        name = getattr(model, '__name__', str(model))
        super().__init__(f'{name} {ident} not found' if ident is not None else f'{name} not found')


class Conflict(InventoryError):
    status_code = 409
    kind = 'conflict'


class UniquenessConflict(Conflict):
    kind = 'uniqueness_conflict'

    def __init__(self, errors, message='A record with the same value already exists.'):
        super().__init__(message)
        self.errors = errors

    def to_dict(self):
        body = super().to_dict()
        body['errors'] = self.errors
        return body


def register_error_handlers(app):
    @app.errorhandler(InventoryError)
    def handle_inventory_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        # trailing-slash redirects keep their Location header
        if isinstance(error, RequestRedirect):
            return error
        return jsonify({'error': error.name.lower().replace(' ', '_'),
                        'message': error.description}), error.code
