# Overview: Pytest coverage for the Flask CLI command groups.

from tcoffice.extensions import db
from tcoffice.models import Employee, SessionToken, User
from tcoffice.services import session_service


def test_employees_add_and_list(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["employees", "add", "--id", "4", "--name", "Dev"])
    assert result.exit_code == 0
    assert "PASS Created employee: Dev (ID: 4)" in result.output

    result = runner.invoke(args=["employees", "list"])
    assert "Dev" in result.output


def test_employees_add_duplicate_fails(app, employees):
    result = app.test_cli_runner().invoke(args=["employees", "add", "--id", "1", "--name", "Again"])
    assert result.exit_code != 0
    assert "already exists" in result.output


def test_employees_import_csv(app, tmp_path):
    path = tmp_path / "employees.csv"
    path.write_text("employee_id,name\n10,Esi\n11,Farid\nabc,Broken\n", encoding="utf-8")

    result = app.test_cli_runner().invoke(args=["employees", "import-csv", str(path)])

    assert result.exit_code == 0
    assert "Imported 2 employees (1 skipped)" in result.output
    assert db.session.query(Employee).count() == 2


def test_users_create_and_list(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=[
        "users", "create", "--email", "admin@tc.local", "--password", "Password123!", "--name", "Admin",
    ])
    assert result.exit_code == 0
    assert db.session.query(User).filter_by(email="admin@tc.local").count() == 1

    result = runner.invoke(args=["users", "list"])
    assert "admin@tc.local" in result.output


def test_users_create_weak_password(app):
    result = app.test_cli_runner().invoke(args=[
        "users", "create", "--email", "weak@tc.local", "--password", "weak",
    ])
    assert result.exit_code != 0
    assert db.session.query(User).count() == 0


def test_cleanup_sessions(app, user):
    result = app.test_cli_runner().invoke(args=["maintenance", "cleanup-sessions"])
    assert result.exit_code == 0
    assert "Deleted 0 sessions" in result.output


def test_users_deactivate_revokes_sessions(app, user):
    _, token = session_service.create_session(user_id=user.id)
    session_service.create_session(user_id=user.id)

    result = app.test_cli_runner().invoke(args=["users", "deactivate", "--email", "OWNER@tc.local"])

    assert result.exit_code == 0
    assert "2 sessions revoked" in result.output
    assert db.session.get(User, user.id).is_active is False
    assert db.session.query(SessionToken).filter_by(is_revoked=False).count() == 0
    assert session_service.validate_session(token) is None


def test_users_deactivate_unknown_email(app):
    result = app.test_cli_runner().invoke(args=["users", "deactivate", "--email", "ghost@tc.local"])
    assert result.exit_code != 0
    assert "User not found" in result.output
