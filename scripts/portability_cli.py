# scripts/portability_cli.py
"""
Operator CLI for tenant export / import / backup.

    python scripts/portability_cli.py export tenant-a -o tenant-a.json --base-url https://example.com
    python scripts/portability_cli.py import tenant-b tenant-a.json
    python scripts/portability_cli.py backup tenant-a
    python scripts/portability_cli.py backup-all
    python scripts/portability_cli.py prune tenant-a --retain-days 30
    python scripts/portability_cli.py restore tenant-a backups/tenant-a/2024-05-01.json
"""
import sys
import json
import asyncio
import logging
import argparse
import pathlib

from tenant_portability.core.config import settings
from tenant_portability.core.context import AppContext
from tenant_portability.core.storage.factory import get_storage_provider
from tenant_portability.db.session import SessionLocal, engine
from tenant_portability.services.exceptions import ServiceException
from tenant_portability.services.portability.export_service import ExportService
from tenant_portability.services.portability.import_service import ImportService
from tenant_portability.services.backup.backup_service import BackupService

logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export, import and back up tenant content.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_export = sub.add_parser("export", help="Write a tenant envelope to a file (or stdout).")
    p_export.add_argument("tenant_id")
    p_export.add_argument("-o", "--output", type=pathlib.Path, help="Output file. Defaults to stdout.")
    p_export.add_argument("--base-url", default=None, help="Origin used to absolutize relative media URLs.")

    p_import = sub.add_parser("import", help="Import an envelope file into a tenant.")
    p_import.add_argument("tenant_id")
    p_import.add_argument("envelope", type=pathlib.Path)
    p_import.add_argument("--legacy-id-scan", action="store_true", default=None,
                          help="Also rewrite bare numeric tokens inside free text.")

    p_backup = sub.add_parser("backup", help="Snapshot one tenant to object storage.")
    p_backup.add_argument("tenant_id")

    sub.add_parser("backup-all", help="Snapshot every tenant sequentially.")

    p_restore = sub.add_parser("restore", help="Import a stored snapshot into a tenant.")
    p_restore.add_argument("tenant_id")
    p_restore.add_argument("key", help="Snapshot key, e.g. backups/tenant-a/2024-05-01.json")

    p_prune = sub.add_parser("prune", help="Delete snapshots older than the retention window.")
    p_prune.add_argument("tenant_id")
    p_prune.add_argument("--retain-days", type=int, default=settings.BACKUP_RETENTION_DAYS)

    return parser

async def run(args: argparse.Namespace, context: AppContext) -> int:
    """执行子命令，返回进程退出码。"""
    if args.command == "export":
        body = await ExportService(context).export_to_json(args.tenant_id, args.base_url)
        if args.output:
            args.output.write_bytes(body)
            logger.info(f"Exported tenant {args.tenant_id} to {args.output} ({len(body)} bytes)")
        else:
            sys.stdout.write(body.decode("utf-8") + "\n")
        return 0

    if args.command in ("import", "restore"):
        if args.command == "import":
            payload = json.loads(args.envelope.read_text(encoding="utf-8"))
        else:
            payload = await BackupService(context).load_snapshot(args.key)
        legacy = getattr(args, "legacy_id_scan", None)
        result = await ImportService(context, legacy_token_scan=legacy).import_tenant(args.tenant_id, payload)
        print(result.model_dump_json(indent=2))
        return 0 if result.success else 1

    service = BackupService(context)
    if args.command == "backup":
        await service.require_tenant(args.tenant_id)
        result = await service.backup_one(args.tenant_id)
    elif args.command == "backup-all":
        result = await service.backup_all()
    else:
        result = await service.prune_older_than(args.tenant_id, args.retain_days)
        print(result.model_dump_json(indent=2))
        return 0 if result.failed == 0 else 1

    print(result.model_dump_json(indent=2))
    return 0 if result.success else 1

async def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    context = AppContext(session_factory=SessionLocal, storage=get_storage_provider())
    try:
        return await run(args, context)
    except ServiceException as e:
        logger.error(f"{args.command} failed: {e.message}")
        return 2
    finally:
        await engine.dispose()

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
