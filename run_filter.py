#!/usr/bin/env python3
import argparse
import sys

from app.application.use_cases.run_virtual_filter import RunVirtualFilterUseCase
from app.config.logger import logger
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository
from app.infrastructure.db.session import create_session_factory


def main():
    parser = argparse.ArgumentParser(description="Прогон виртуального фильтра для сессии")
    parser.add_argument("session_id")
    args = parser.parse_args()

    logger.info("=== run_filter старт ===")
    session = create_session_factory()()
    try:
        repo = AdmissionRepository(session)
        result = RunVirtualFilterUseCase(repo).execute(args.session_id)
        print(f"✅ Сессия {result.session_id}: студентов {result.total_students}, "
              f"зачислено {result.admitted_count}, {result.execution_time} мс")
    except Exception as e:
        print("❌ Ошибка прогона фильтра:", e, file=sys.stderr)
        sys.exit(1)
    finally:
        session.close()
        logger.info("=== run_filter завершён ===")


if __name__ == "__main__":
    main()
