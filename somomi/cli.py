"""CLI entry point for somomi."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from dotenv import load_dotenv

from .config import load_config
from .db import Product, ProductDB
from .freshness import (
    FreshnessEngine,
    FreshnessError,
    FreshnessStatus,
    ProductTimeline,
    effective_expiry,
)

_TIER_LABELS = {
    "normal": "여유",
    "warning": "주의",
    "urgent": "임박",
    "expired": "만료",
}


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date (YYYY-MM-DD): {value!r}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="somomi",
        description="소모미: 제품 개봉일과 사용기한으로 남은 수명을 관리합니다",
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="설정 파일 경로 (TOML)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="디버그 로그 출력"
    )

    sub = parser.add_subparsers(dest="command")

    # add
    add_parser = sub.add_parser("add", help="제품 등록")
    add_parser.add_argument("name", type=str)
    add_parser.add_argument("--category", type=str, default="기타")
    add_parser.add_argument("--location", type=str, default="")
    add_parser.add_argument("--memo", type=str, default="")
    add_parser.add_argument(
        "--life-days", type=int, default=None, help="개봉 후 예상 사용 일수"
    )
    add_parser.add_argument("--opened", type=_iso_date, default=None, help="개봉일")
    add_parser.add_argument("--expiry", type=_iso_date, default=None, help="유통기한")

    # open
    open_parser = sub.add_parser("open", help="제품 개봉")
    open_parser.add_argument("id", type=int)
    open_parser.add_argument("--date", type=_iso_date, default=None)

    # consume
    consume_parser = sub.add_parser("consume", help="제품 소진 처리")
    consume_parser.add_argument("id", type=int)
    consume_parser.add_argument("--date", type=_iso_date, default=None)

    # expiry
    expiry_parser = sub.add_parser("expiry", help="유통기한 직접 지정/해제")
    expiry_parser.add_argument("id", type=int)
    group = expiry_parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--set", type=_iso_date, dest="expiry")
    group.add_argument("--clear", action="store_true")

    # status
    status_parser = sub.add_parser("status", help="제품 상태 확인")
    status_parser.add_argument("id", type=int)
    status_parser.add_argument("--json", action="store_true", help="JSON 형식으로 출력")

    # list
    list_parser = sub.add_parser("list", help="제품 목록")
    kind = list_parser.add_mutually_exclusive_group()
    kind.add_argument("--consumed", action="store_true", help="소진된 제품")
    kind.add_argument("--unopened", action="store_true", help="미개봉 제품")
    list_parser.add_argument("--json", action="store_true", help="JSON 형식으로 출력")

    # expiring
    expiring_parser = sub.add_parser("expiring", help="임박/만료 제품")
    expiring_parser.add_argument(
        "--warning", action="store_true", help="주의 단계도 포함"
    )
    expiring_parser.add_argument("--json", action="store_true", help="JSON 형식으로 출력")

    # delete
    delete_parser = sub.add_parser("delete", help="제품 삭제")
    delete_parser.add_argument("id", type=int)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    engine = FreshnessEngine(
        warning_pct=config.freshness.warning_pct,
        urgent_pct=config.freshness.urgent_pct,
    )
    db = ProductDB(config.database.path)
    today = date.today()

    try:
        match args.command:
            case "add":
                _cmd_add(db, config, today, args)
            case "open":
                product = db.open_product(args.id, args.date, today)
                print(f"{product.name} 개봉: {product.timeline.opened_at}")
            case "consume":
                product = db.consume_product(args.id, args.date, today)
                print(f"{product.name} 소진: {product.timeline.consumed_at}")
            case "expiry":
                expiry = None if args.clear else args.expiry
                product = db.set_explicit_expiry(args.id, expiry)
                print(f"{product.name} 유통기한: {expiry or '자동 계산'}")
            case "status":
                _cmd_status(db, engine, today, args)
            case "list":
                _cmd_list(db, engine, today, args)
            case "expiring":
                items = db.get_expiring(engine, today, include_warning=args.warning)
                _print_products(items, args.json)
            case "delete":
                db.delete_product(args.id)
                print(f"제품 {args.id} 삭제됨")
    except KeyError as e:
        print(f"제품을 찾을 수 없습니다: {e}", file=sys.stderr)
        sys.exit(1)
    except FreshnessError as e:
        print(f"[{e.kind}] {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


def _cmd_add(db: ProductDB, config, today: date, args) -> None:
    life_days = args.life_days
    if life_days is None:
        life_days = config.freshness.default_life_days
    product = Product(
        name=args.name,
        category=args.category,
        location=args.location,
        memo=args.memo,
        timeline=ProductTimeline(
            estimated_life_days=life_days,
            opened_at=args.opened,
            explicit_expiry_at=args.expiry,
        ),
    )
    product_id = db.add_product(product, now=today)
    print(f"등록 완료: {args.name} (ID {product_id})")


def _cmd_status(db: ProductDB, engine: FreshnessEngine, today: date, args) -> None:
    product = db.get_product(args.id)
    if product is None:
        raise KeyError(args.id)
    status = engine.compute_status(product.timeline, today)
    _print_products([(product, status)], args.json)


def _cmd_list(db: ProductDB, engine: FreshnessEngine, today: date, args) -> None:
    if args.consumed:
        products = db.list_consumed()
    elif args.unopened:
        products = db.list_unopened()
    else:
        products = db.list_active()
    items = [(p, engine.compute_status(p.timeline, today)) for p in products]
    _print_products(items, args.json)


def _product_to_dict(product: Product, status: FreshnessStatus) -> dict:
    tl = product.timeline
    expiry = effective_expiry(tl)
    return {
        "id": product.id,
        "name": product.name,
        "category": product.category,
        "location": product.location,
        "state": tl.state.value,
        "opened_at": tl.opened_at.isoformat() if tl.opened_at else None,
        "consumed_at": tl.consumed_at.isoformat() if tl.consumed_at else None,
        "expiry": expiry.isoformat() if expiry else None,
        "percent_remaining": status.percent_remaining,
        "days_remaining": status.days_remaining,
        "urgency_tier": status.urgency_tier.value,
    }


def _print_products(items: list[tuple[Product, FreshnessStatus]], as_json: bool) -> None:
    if as_json:
        data = [_product_to_dict(p, s) for p, s in items]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if not items:
        print("해당하는 제품이 없습니다.")
        return

    for product, status in items:
        if status.consumed:
            print(f"  [{product.id}] {product.name:<12} 소진 {product.timeline.consumed_at}")
            continue
        bar = "█" * (status.percent_remaining // 10)
        days = status.days_remaining
        if days > 0:
            left = f"{days}일 남음"
        elif days == 0:
            left = "오늘까지"
        else:
            left = f"{abs(days)}일 지남"
        label = _TIER_LABELS[status.urgency_tier.value]
        print(
            f"  [{product.id}] {product.name:<12} {status.percent_remaining:>3}% "
            f"{bar:<10} {left} ({label})"
        )


if __name__ == "__main__":
    main()
