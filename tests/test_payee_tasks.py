"""Tests for the background payee registration queue."""

import asyncio

from conftest import FakePaymanClient
from sqlalchemy.orm import Session, sessionmaker

from scholarpay.workers.payee_tasks import PayeeRegistrationQueue


def test_run_marks_task_succeeded(session: Session, session_factory: sessionmaker) -> None:
    """A successful registration is stored as succeeded with a completion time."""
    provider = FakePaymanClient()
    queue = PayeeRegistrationQueue(session_factory)
    task = queue.enqueue(session, "ada@uni.edu", "Ada Lovelace", "app-1")
    if task.status != "pending":
        msg = f"New task should be pending, got {task.status}"
        raise AssertionError(msg)
    done = asyncio.run(queue.run(task.id, provider))
    if done is None or done.status != "succeeded" or done.completed_at is None:
        msg = f"Unexpected task after run: {done}"
        raise AssertionError(msg)
    if provider.commands("add_payee") != [("ada@uni.edu", "Ada Lovelace")]:
        msg = f"Unexpected provider calls: {provider.calls}"
        raise AssertionError(msg)


def test_run_records_failure_without_raising(session: Session, session_factory: sessionmaker) -> None:
    """A provider failure is stored on the task instead of being raised."""
    provider = FakePaymanClient()
    provider.fail_add_payee = True
    queue = PayeeRegistrationQueue(session_factory)
    task = queue.enqueue(session, "ada@uni.edu", "Ada Lovelace")
    done = asyncio.run(queue.run(task.id, provider))
    if done is None or done.status != "failed":
        msg = f"Expected a failed task, got {done}"
        raise AssertionError(msg)
    if "payee registration rejected" not in (done.error or ""):
        msg = f"Expected the provider error on the task, got {done.error}"
        raise AssertionError(msg)
    stored = queue.get(session_factory(), task.id)
    if stored is None or stored.status != "failed":
        msg = f"Failure was not persisted: {stored}"
        raise AssertionError(msg)


def test_run_unknown_task(session_factory: sessionmaker) -> None:
    """Running an unknown task id does nothing."""
    provider = FakePaymanClient()
    if asyncio.run(PayeeRegistrationQueue(session_factory).run("missing", provider)) is not None:
        msg = "Expected None for an unknown task"
        raise AssertionError(msg)
    if provider.calls:
        msg = "The provider should not be called for an unknown task"
        raise AssertionError(msg)
