#!/usr/bin/env python3
import argparse
import json
import sys

from app.application.use_cases.import_session import ImportSessionSnapshotUseCase
from app.config.logger import logger
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository
from app.infrastructure.db.session import create_session_factory


def main():
    parser = argparse.ArgumentParser(description="Импорт сессии приёма из JSON")
    parser.add_argument("path", help="JSON с ключами session / majors / students / quotas / applications")
    args = parser.parse_args()

    # 1) Загрузка JSON
    with open(args.path, encoding="utf-8") as json_file:
        payload = json.load(json_file)

    # 2) Настройка БД
    Session = create_session_factory()
    session = Session()
    repo = AdmissionRepository(session)

    # 3) Сохраняем всё в БД
    try:
        counts = ImportSessionSnapshotUseCase(repo).execute(payload)
        print(f"Импортировано: {counts}")
    except Exception as e:
        logger.exception("Ошибка импорта")
        print("❌ Ошибка импорта:", e, file=sys.stderr)
        sys.exit(1)
    finally:
        session.close()


if __name__ == "__main__":
    main()
