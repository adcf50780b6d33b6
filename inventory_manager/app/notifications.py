# app/notifications.py
import logging

from flask import current_app
from flask_mail import Message

from inventory_manager.app import mail

logger = logging.getLogger(__name__)


def send_assignment_email(assignment):
    custodian = assignment.custodian
    if custodian is None or not custodian.email:
        return False
    item = assignment.item
    msg = Message('New Item Assignment',
                  sender=current_app.config.get('MAIL_DEFAULT_SENDER'),
                  recipients=[custodian.email])
    due = assignment.due_date.strftime('%Y-%m-%d') if assignment.due_date else 'not set'
    msg.body = f'''Dear {custodian.username},

You have been assigned an item:
Property number: {item.property_number}
Name: {item.name}
Assigned on: {assignment.assigned_date.strftime('%Y-%m-%d')}
Due on: {due}

Please log in to the inventory system to view the details.

Thank you,
Property Office
'''
    try:
        mail.send(msg)
    except OSError as exc:
        # the assignment stands even when the mail server is down
        logger.warning('assignment %s e-mail to %s failed: %s', assignment.id, custodian.email, exc)
        return False
    return True
