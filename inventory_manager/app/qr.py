# app/qr.py
import json
import os
import time
from io import BytesIO

import qrcode


def qr_payload(item):
    return json.dumps({
        'item_id': item.id,
        'property_number': item.property_number,
        'name': item.name,
    })


def render_qr_png(data):
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img_buffer = BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(img_buffer, format='PNG')
    return img_buffer.getvalue()


def write_qr_code(item, folder):
    """Render the item's QR code to ``folder`` and return the file path"""
    os.makedirs(folder, exist_ok=True)
    path = os.path.join(folder, f'{item.id}_{int(time.time() * 1000)}.png')
    with open(path, 'wb') as fh:
        fh.write(render_qr_png(qr_payload(item)))
    return path


def delete_qr_code(path):
    if path and os.path.exists(path):
        os.remove(path)
        return True
    return False
