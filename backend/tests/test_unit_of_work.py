"""
UnitOfWork commit/rollback behaviour against the test database.
"""
import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import TransactionFailed
from app.models import Course, CourseModule
from app.services.unit_of_work import UnitOfWork


def make_course(name="Unit"):
    return Course(
        course_name=name,
        description="desc",
        department="QA",
        mentor_name="Mario",
        course_duration="1 week",
    )


def test_commits_on_clean_exit(db_session):
    with UnitOfWork(db_session) as uow:
        db_session.add(make_course())
        uow.flush()

    assert not uow.active
    db_session.rollback()
    assert db_session.query(Course).count() == 1


def test_other_errors_roll_back_and_propagate_unchanged(db_session):
    with pytest.raises(ValueError, match="boom"):
        with UnitOfWork(db_session) as uow:
            db_session.add(make_course())
            uow.flush()
            raise ValueError("boom")

    assert db_session.query(Course).count() == 0


def test_store_errors_become_transaction_failed_with_context(db_session):
    with pytest.raises(TransactionFailed) as excinfo:
        with UnitOfWork(db_session, error_context="Failed to create module") as uow:
            db_session.add(CourseModule(course_id=12345, module_name="Orphan", module_order=1))
            uow.flush()

    assert excinfo.value.message.startswith("Failed to create module: ")
    assert "FOREIGN KEY" in excinfo.value.message
    assert isinstance(excinfo.value.__cause__, IntegrityError)
    assert db_session.query(CourseModule).count() == 0


def test_earlier_reads_do_not_block_the_write_scope(db_session):
    db_session.query(Course).count()

    with UnitOfWork(db_session) as uow:
        db_session.add(make_course("After read"))
        uow.flush()

    assert db_session.query(Course).filter(Course.course_name == "After read").count() == 1


def test_pending_changes_are_not_committed_by_a_new_unit(db_session):
    db_session.add(make_course("Stray"))

    with pytest.raises(RuntimeError):
        with UnitOfWork(db_session):
            pass

    db_session.rollback()
    assert db_session.query(Course).count() == 0
