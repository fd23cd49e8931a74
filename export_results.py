#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path

from app.application.use_cases.export_results import ExportAdmissionResultsUseCase
from app.config.config import settings
from app.config.logger import logger
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository
from app.infrastructure.db.session import create_session_factory


def main():
    parser = argparse.ArgumentParser(description="Выгрузка зачисленных в Excel")
    parser.add_argument("session_id")
    parser.add_argument("output", nargs="?", help="путь к .xlsx (по умолчанию EXPORT_DIR)")
    args = parser.parse_args()

    out = Path(args.output) if args.output else settings.export_path / f"admission-results-{args.session_id}.xlsx"
    session = create_session_factory()()
    try:
        content = ExportAdmissionResultsUseCase(AdmissionRepository(session)).execute(args.session_id)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(content)
        print(f"✅ Выгрузка сохранена: {out}")
    except Exception as e:
        logger.exception("Ошибка выгрузки")
        print("❌ Ошибка выгрузки:", e, file=sys.stderr)
        sys.exit(1)
    finally:
        session.close()


if __name__ == "__main__":
    main()
