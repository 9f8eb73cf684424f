"""
Create a local-auth employee (e.g. the first director). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD EMP_ID NAME DEPARTMENT [role]
Example:
  python -m app.scripts.create_user ceo@example.com your-secure-password DIR001 "Dana Lee" Executive director
"""
import argparse
import sys
import uuid

from app.core.database import SessionLocal
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from app.models.user import User
from app.schemas.common import ROLE_VALUES


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Taskflow employee with a local password.")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("emp_id", help="Employee ID, e.g. TEST001")
    parser.add_argument("name", help="Display name")
    parser.add_argument("department", help="Department name")
    parser.add_argument("role", nargs="?", default="staff", choices=sorted(ROLE_VALUES))
    args = parser.parse_args()

    email = args.email.strip()
    emp_id = args.emp_id.strip()
    if not email or not emp_id or not args.name.strip():
        print("Email, employee ID and name must be non-empty.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        if db.query(User).filter(User.emp_id == emp_id).first():
            print(f"Employee ID '{emp_id}' already exists.", file=sys.stderr)
            return 1
        if db.query(User).filter(User.email == email).first():
            print(f"Email '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            id=str(uuid.uuid4()),
            emp_id=emp_id,
            name=args.name.strip(),
            email=email,
            department=args.department.strip() or None,
            role=args.role,
            password_hash=hash_password(args.password),
        )
        db.add(user)
        db.commit()
        print(f"Created employee '{emp_id}' ({email}) with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
