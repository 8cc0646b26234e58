#!/usr/bin/env python3
"""Set a new password for an existing dashboard user.

Run from project root:
  python scripts/reset_user_password.py <email> <new_password>

Also clears any pending reset token and login lockout.
"""
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from bloombuddies import create_app
from bloombuddies.extensions import db
from bloombuddies.models.user import User


def main(argv):
    if len(argv) != 3:
        print('Usage: python scripts/reset_user_password.py <email> <new_password>')
        return 1
    email, password = argv[1], argv[2]
    if len(password) < 8:
        print('Password must be at least 8 characters.')
        return 1

    app = create_app()
    with app.app_context():
        user = User.find_by_email(email)
        if not user:
            print('No user with email', email)
            return 1
        user.set_password(password)
        user.clear_reset_token()
        user.failed_logins = 0
        user.locked_until = None
        db.session.commit()
        print('Password updated for', user.email)
    return 0


if __name__ == '__main__':
    raise SystemExit(main(sys.argv))
