#!/usr/bin/env python3
import argparse
import sys

from app.application.use_cases.queue_notifications import QueueAdmissionNotificationsUseCase
from app.config.logger import logger
from app.infrastructure.db.repositories.admission_repository import AdmissionRepository
from app.infrastructure.db.session import create_session_factory


def main():
    parser = argparse.ArgumentParser(description="Очередь писем зачисленным")
    parser.add_argument("session_id")
    args = parser.parse_args()

    session = create_session_factory()()
    try:
        n = QueueAdmissionNotificationsUseCase(AdmissionRepository(session)).execute(args.session_id)
        print(f"✅ Писем поставлено в очередь: {n}")
    except Exception as e:
        logger.exception("Ошибка постановки писем в очередь")
        print("❌ Ошибка:", e, file=sys.stderr)
        sys.exit(1)
    finally:
        session.close()


if __name__ == "__main__":
    main()
