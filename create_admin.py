import os

from dashboard import create_app
from dashboard.extensions import db
from dashboard.models import User
from dashboard.utils.passwords import hash_password

NAME = os.environ.get("ADMIN_NAME", "Dashboard Admin")
EMAIL = os.environ.get("ADMIN_EMAIL", "").strip().lower()
PASSWORD = os.environ.get("ADMIN_PASSWORD", "")

if not EMAIL or not PASSWORD:
    raise SystemExit("Set ADMIN_EMAIL and ADMIN_PASSWORD.")

app = create_app()

with app.app_context():
    existing = User.query.filter(db.func.lower(User.email) == EMAIL).first()
    if existing:
        print("🔁 Updating password for", EMAIL)
        existing.password = hash_password(PASSWORD)
        existing.is_active = True
    else:
        print("🔐 Creating login user...")
        db.session.add(User(name=NAME, email=EMAIL, password=hash_password(PASSWORD)))

    db.session.commit()

    print("✅ Login ready:", EMAIL)
