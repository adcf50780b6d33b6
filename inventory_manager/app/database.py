import logging
import os
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from inventory_manager.app import db
from inventory_manager.app.errors import Conflict, InventoryError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work():
    """Commit everything queued on the session once, or roll all of it back.

    Nested blocks join the outermost one, so a composite operation commits a
    single time.
    """
    info = db.session.info
    depth = info.get('unit_of_work_depth', 0)
    info['unit_of_work_depth'] = depth + 1
    try:
        yield db.session
        if depth == 0:
            db.session.commit()
    except IntegrityError as exc:
        if depth == 0:
            db.session.rollback()
        logger.warning('integrity error rolled back: %s', exc.orig)
        raise Conflict('The change conflicts with existing data.') from exc
    except InventoryError:
        if depth == 0:
            db.session.rollback()
        raise
    except Exception:
        if depth == 0:
            db.session.rollback()
            logger.exception('unexpected error, transaction rolled back')
        raise
    finally:
        info['unit_of_work_depth'] = depth


def seed_db():
    """Create the first superadmin account when the user table is empty"""
    from inventory_manager.app.models import User
    from inventory_manager.roles import SUPERUSER_ROLE

    if User.query.first() is not None:
        return None
    admin = User(username=os.environ.get('ADMIN_USERNAME') or 'admin',
                 email=os.environ.get('ADMIN_EMAIL') or 'admin@example.com',
                 role=SUPERUSER_ROLE)
    admin.set_password(os.environ.get('ADMIN_PASSWORD') or 'change-me')
    with unit_of_work():
        db.session.add(admin)
    logger.info('seeded superadmin %s', admin.email)
    return admin
