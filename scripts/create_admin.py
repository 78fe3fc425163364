"""Create (or reset the password of) an admin account.

Usage:
  python scripts/create_admin.py admin@neuro-care.fr 'a-long-password'
"""

import sys
import os

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
  sys.path.insert(0, ROOT)

from neurocare import create_app
from neurocare.extensions import db
from neurocare.models.user import User


def main(argv):
  if len(argv) != 3:
    print(__doc__)
    return 2
  email, password = argv[1].strip().lower(), argv[2]
  if len(password) < 8:
    print('password must be at least 8 characters')
    return 2
  app = create_app()
  with app.app_context():
    user = User.query.filter_by(email=email).first()
    if user is None:
      user = User(email=email, role='admin')
      db.session.add(user)
    elif user.role != 'admin':
      print(f'{email} exists with role {user.role}; refusing to promote it')
      return 1
    user.set_password(password)
    db.session.commit()
    print(f'admin {email} ready (id {user.id})')
  return 0


if __name__ == '__main__':
  sys.exit(main(sys.argv))
