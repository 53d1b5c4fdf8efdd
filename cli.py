import argparse
import datetime
import json
import logging
import os
import shutil

from config import APP_VERSION
from db import StoreDatabase
from tracker_api import TrackerAPI


def export_workouts(api: TrackerAPI, fmt: str, output_dir: str = ".") -> list[str]:
    os.makedirs(output_dir, exist_ok=True)
    paths = []
    for summary in api.list_workouts():
        data = api.export_workout(summary.id, fmt)
        out_path = os.path.join(output_dir, f"workout_{summary.date}_{summary.id}.{fmt}")
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(data)
        paths.append(out_path)
    return paths


def backup_store(api: TrackerAPI, backup_path: str) -> None:
    api.store_db.load_store()
    shutil.copy(api.store_db.path, backup_path)


def restore_store(api: TrackerAPI, backup_path: str) -> None:
    if not os.path.exists(backup_path):
        raise FileNotFoundError(backup_path)
    # refuse backups that would not load
    StoreDatabase(backup_path).load_store()
    api.store_db.path.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy(backup_path, api.store_db.path)


def demo_data(api: TrackerAPI) -> bool:
    """Populate the store with a demo workout if it is empty."""
    if api.list_workouts():
        print("Store already contains workouts")
        return False
    session = api.create_workout("Demo session", datetime.date.today().isoformat())
    api.add_exercise(session.id, {"name": "Bench Press", "weight": 60, "sets": 3, "reps": 8})
    api.add_exercise(session.id, {"name": "Squat", "weight": 80, "sets": 5, "reps": 5})
    print("Demo data inserted")
    return True


def stats_report(api: TrackerAPI) -> str:
    report = api.statistics.report()
    report["personal_records"] = {
        name: record.model_dump(by_alias=True)
        for name, record in api.personal_records.ranked()
    }
    return json.dumps(report, indent=2, ensure_ascii=False)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Utility commands")
    parser.add_argument("--data-dir", default=None)
    parser.add_argument("--yaml", default="settings.yaml")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--fmt", choices=["csv", "json"], default="csv")
    exp.add_argument("--out", default=".")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--out", default="backup.json")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.json")

    sub.add_parser("demo")
    sub.add_parser("stats")

    args = parser.parse_args(argv)

    api = TrackerAPI(data_dir=args.data_dir, yaml_path=args.yaml)
    logging.basicConfig(level=api.settings.log_level)

    if args.cmd == "export":
        export_workouts(api, args.fmt, args.out)
    elif args.cmd == "backup":
        backup_store(api, args.out)
    elif args.cmd == "restore":
        restore_store(api, args.src)
    elif args.cmd == "demo":
        demo_data(api)
    elif args.cmd == "stats":
        print(stats_report(api))


if __name__ == "__main__":
    main()
