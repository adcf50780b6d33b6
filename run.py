import os

from waitress import serve

from inventory_manager.app import create_app
from inventory_manager.app.database import seed_db
from inventory_manager.config import BASE_DIR

os.makedirs(BASE_DIR / 'data', exist_ok=True)
app = create_app()

# Seed the first administrator account
with app.app_context():
    seed_db()

serve(app, host="0.0.0.0", port=5000)
