"""
Tests for the batch entry points: the in-process scheduler and the
command-line runner used from system cron.
"""

import asyncio

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from yieldwallet.config import settings
from yieldwallet.database import Base
from yieldwallet.jobs import run_accrual, scheduler


class TestScheduler:

    async def test_registers_daily_job(self):
        sched = scheduler.start_scheduler()
        try:
            job = sched.get_job(scheduler.ACCRUAL_JOB_ID)
            assert job is not None
            assert job.coalesce is True
            assert job.max_instances == 1
            fields = {f.name: str(f) for f in job.trigger.fields}
            assert fields["hour"] == str(settings.ACCRUAL_CRON_HOUR)
            assert fields["minute"] == str(settings.ACCRUAL_CRON_MINUTE)

            # Starting again returns the running instance
            assert scheduler.start_scheduler() is sched
        finally:
            scheduler.stop_scheduler()


class TestRunAccrualCommand:

    def _use_database(self, monkeypatch, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'cron.db'}"

        async def create_tables():
            engine = create_async_engine(url)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            await engine.dispose()

        asyncio.run(create_tables())

        engine = create_async_engine(url)
        monkeypatch.setattr(run_accrual, "engine", engine)
        monkeypatch.setattr(
            run_accrual,
            "AsyncSessionLocal",
            async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
        )

    def test_dry_run(self, monkeypatch, tmp_path, capsys):
        self._use_database(monkeypatch, tmp_path)

        exit_code = run_accrual.main(["--dry-run", "--date", "2026-01-02"])
        assert exit_code == 0
        assert "0 positions due on 2026-01-02" in capsys.readouterr().out

    def test_run(self, monkeypatch, tmp_path, capsys):
        self._use_database(monkeypatch, tmp_path)

        exit_code = run_accrual.main(["--date", "2026-01-02"])
        assert exit_code == 0
        assert "Accrual for 2026-01-02: 0 processed" in capsys.readouterr().out
