#!/usr/bin/env python3
"""Create the first admin user for the dashboard.

Run from project root:
  python scripts/setup_admin.py [email] [password] [name]

Missing arguments are prompted for; the password is never echoed.
"""
import getpass
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from bloombuddies import create_app
from bloombuddies.extensions import db
from bloombuddies.models.user import User

MIN_PASSWORD = 8


def main(argv):
    email = argv[1] if len(argv) > 1 else input('Admin email: ').strip()
    password = argv[2] if len(argv) > 2 else getpass.getpass('Admin password: ')
    name = argv[3] if len(argv) > 3 else (input('Full name (optional): ').strip() or None)

    if not email or '@' not in email:
        print('A valid email is required.')
        return 1
    if len(password) < MIN_PASSWORD:
        print(f'Password must be at least {MIN_PASSWORD} characters.')
        return 1

    app = create_app()
    with app.app_context():
        db.create_all()
        if User.find_by_email(email):
            print('User already exists:', email)
            return 1
        user = User(email=email.lower(), name=name, role='admin')
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        print(f'Admin user created: {user.email} (id={user.id})')
    return 0


if __name__ == '__main__':
    raise SystemExit(main(sys.argv))
