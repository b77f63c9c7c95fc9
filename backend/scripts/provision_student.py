#!/usr/bin/env python
"""Provision clearance portal accounts.

Accounts are created by the records office, never through the API. This
script creates student and administrator accounts, records payment, and
marks certificates ready for collection.

Usage:
    python backend/scripts/provision_student.py add eng/2020/001 --email ada@uni.edu
    python backend/scripts/provision_student.py add admin01 --role ADMIN
    python backend/scripts/provision_student.py set-paid eng/2020/001
    python backend/scripts/provision_student.py mark-ready eng/2020/001

Environment Variables:
    DATABASE_URL: PostgreSQL connection string
    PASSWORD_PEPPER: Password hashing pepper (required for add)
    PROVISION_PASSWORD: Initial password (prompted for when unset)
"""

import argparse
import getpass
import os
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from sqlalchemy.exc import SQLAlchemyError

from auth.password import hash_password, validate_password_strength
from auth.roles import UserRole
from database import SessionLocal
from models.certificate_ready import CertificateReady
from models.student import Student


def _read_password() -> str:
    password = os.getenv("PROVISION_PASSWORD")
    if password:
        return password
    password = getpass.getpass("Initial password: ")
    if password != getpass.getpass("Repeat password: "):
        print("ERROR: Passwords do not match")
        sys.exit(1)
    return password


def add_account(session, args) -> None:
    if session.get(Student, args.matric) is not None:
        print(f"ERROR: Account {args.matric} already exists")
        sys.exit(1)

    password = _read_password()
    is_valid, error_msg = validate_password_strength(password)
    if not is_valid:
        print(f"ERROR: Password does not meet strength requirements: {error_msg}")
        sys.exit(1)

    student = Student(
        matric=args.matric,
        email=args.email,
        role=args.role,
        password_hash=hash_password(password),
        paid=args.paid,
    )
    session.add(student)
    session.commit()

    print("SUCCESS: Account created")
    print(f"  Matric: {student.matric}")
    print(f"  Email:  {student.email}")
    print(f"  Role:   {student.role}")
    print(f"  Paid:   {student.paid}")


def _get_student(session, matric: str) -> Student:
    student = session.get(Student, matric)
    if student is None or student.role != UserRole.STUDENT.value:
        print(f"ERROR: Student {matric} not found")
        sys.exit(1)
    return student


def set_paid(session, args) -> None:
    student = _get_student(session, args.matric)
    student.paid = True
    session.commit()
    print(f"SUCCESS: Payment confirmed for {student.matric}")


def mark_ready(session, args) -> None:
    student = _get_student(session, args.matric)
    if session.get(CertificateReady, student.matric) is not None:
        print(f"Certificate for {student.matric} is already marked ready")
        return
    session.add(CertificateReady(matric=student.matric))
    session.commit()
    print(f"SUCCESS: Certificate for {student.matric} marked ready for collection")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Provision clearance portal accounts")
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Create a student or administrator account")
    add.add_argument("matric", help="Matriculation id, also the login username")
    add.add_argument("--email", default=None)
    add.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.STUDENT.value,
    )
    add.add_argument("--paid", action="store_true", help="Payment already confirmed")
    add.set_defaults(handler=add_account)

    paid = commands.add_parser("set-paid", help="Confirm a student's payment")
    paid.add_argument("matric")
    paid.set_defaults(handler=set_paid)

    ready = commands.add_parser("mark-ready", help="Mark a certificate ready for collection")
    ready.add_argument("matric")
    ready.set_defaults(handler=mark_ready)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    session = SessionLocal()

    try:
        args.handler(session, args)
    except (SQLAlchemyError, ValueError) as e:
        session.rollback()
        print(f"ERROR: {e}")
        sys.exit(1)
    finally:
        session.close()


if __name__ == "__main__":
    main()
