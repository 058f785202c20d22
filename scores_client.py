"""Command line client for the ticket rating score service.

Usage examples:

- Daily or weekly category scores as a table:
    `python scores_client.py category-scores --from 2019-03-01 --to 2019-04-01 --out table`

- Ticket scores as JSON:
    `python scores_client.py ticket-scores --out json`

- Overall score:
    `python scores_client.py overall-score --from 2019-03-01 --to 2019-03-31 --out table`

- Change from March to April:
    `python scores_client.py period-diff --from 2019-03-01 --to 2019-03-31 --second-from 2019-04-01 --second-to 2019-04-30`
"""
from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import requests
from rich import box
from rich.console import Console
from rich.table import Table

DATE_FORMAT = "%Y-%m-%d"

FORMAT_JSON = "json"
FORMAT_SILENT = "silent"
FORMAT_TABLE = "table"

SESSION = requests.Session()
CONSOLE = Console()

Rows = Tuple[List[str], List[List[str]]]


class ClientError(Exception):
    """Request could not be completed; the message is safe to print."""


def parse_date(value: str) -> str:
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc
    return value


def base_url(addr: str) -> str:
    addr = addr.rstrip("/")
    return addr if "://" in addr else f"http://{addr}"


def fetch(addr: str, path: str, params: Dict[str, str]) -> Dict[str, Any]:
    url = f"{base_url(addr)}{path}"
    try:
        resp = SESSION.get(url, params=params, timeout=10)
    except requests.RequestException as exc:
        raise ClientError(f"failed to reach {url}: {exc}") from exc
    if resp.status_code >= 400:
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        raise ClientError(f"server returned {resp.status_code}: {detail}")
    return resp.json()


def _percent(value: Optional[int]) -> str:
    return "-" if value is None else f"{value} %"


# --- table rows ------------------------------------------------------------

def category_score_rows(resp: Dict[str, Any], max_cols: int) -> Rows:
    """One row per category with its rating count, one column per period."""
    periods: List[str] = []
    by_period: Dict[str, Dict[int, int]] = {}
    for point in resp.get("scores", []):
        label = point["period_label"]
        if label not in by_period:
            by_period[label] = {}
            periods.append(label)
        by_period[label][point["category_id"]] = point["score"]

    shown = periods[:max_cols]
    header = ["Category", "Ratings"] + shown
    rows = []
    for count in resp.get("counts", []):
        row = [count["category_name"], str(count["count"])]
        row.extend(_percent(by_period[label].get(count["category_id"])) for label in shown)
        rows.append(row)
    return header, rows


def ticket_score_rows(resp: Dict[str, Any], max_rows: int) -> Rows:
    """One row per ticket, one column per rating category."""
    categories = list(resp.get("categories", []))
    by_ticket: Dict[int, Dict[str, int]] = {}
    for point in resp.get("scores", []):
        by_ticket.setdefault(point["ticket_id"], {})[point["category_name"]] = point["score"]

    header = ["Ticket"] + categories
    rows = []
    for ticket_id in sorted(by_ticket)[:max_rows]:
        scores = by_ticket[ticket_id]
        rows.append([str(ticket_id)] + [_percent(scores.get(name)) for name in categories])
    return header, rows


def overall_score_rows(resp: Dict[str, Any]) -> Rows:
    return ["Overall score"], [[_percent(resp.get("score", 0))]]


def period_diff_rows(resp: Dict[str, Any]) -> Rows:
    return ["Category", "Change"], [
        [change["category_name"], _percent(change["diff"])] for change in resp.get("changes", [])
    ]


def build_table(header: Sequence[str], rows: Sequence[Sequence[str]], caption: Optional[str] = None) -> Table:
    table = Table(box=box.SIMPLE, caption=caption)
    for name in header:
        table.add_column(name)
    for row in rows:
        table.add_row(*row)
    return table


# --- output ----------------------------------------------------------------

def render(resp: Dict[str, Any], out: str, table_rows: Callable[[Dict[str, Any]], Rows], caption: Optional[str] = None) -> None:
    if out == FORMAT_JSON:
        print(json.dumps(resp, indent=4))
    elif out == FORMAT_TABLE:
        header, rows = table_rows(resp)
        CONSOLE.print(build_table(header, rows, caption))
    elif out == FORMAT_SILENT:
        print("output omitted")
    else:
        CONSOLE.print(resp)


def run_command(args: argparse.Namespace) -> None:
    period = {"from": args.from_, "to": args.to}
    if args.command == "category-scores":
        resp = fetch(args.addr, "/scores/categories", period)
        if args.out == FORMAT_TABLE:
            print(f"Granularity: {resp.get('granularity')}")
        render(
            resp, args.out, lambda r: category_score_rows(r, args.max_cols),
            caption=f"Output limited to {args.max_cols} columns. Use --max-cols to change that",
        )
    elif args.command == "ticket-scores":
        resp = fetch(args.addr, "/scores/tickets", period)
        render(
            resp, args.out, lambda r: ticket_score_rows(r, args.max_rows),
            caption=f"Output limited to {args.max_rows} rows. Use --max-rows to change that",
        )
    elif args.command == "overall-score":
        resp = fetch(args.addr, "/scores/overall", period)
        render(resp, args.out, overall_score_rows)
    elif args.command == "period-diff":
        resp = fetch(
            args.addr,
            "/scores/period-over-period",
            {
                "first_from": args.from_,
                "first_to": args.to,
                "second_from": args.second_from,
                "second_to": args.second_to,
            },
        )
        render(resp, args.out, period_diff_rows)


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--addr", default="localhost:8000", help="Server address")
    common.add_argument(
        "--out", default="", choices=["", FORMAT_JSON, FORMAT_TABLE, FORMAT_SILENT],
        help="Format for the command output",
    )
    common.add_argument("--from", dest="from_", type=parse_date, default="2019-03-01", help="Start date of the period")
    common.add_argument("--to", type=parse_date, default="2019-04-01", help="End date of the period")

    parser = argparse.ArgumentParser(description="Query ticket rating scores")
    sub = parser.add_subparsers(dest="command", required=True)

    category = sub.add_parser("category-scores", parents=[common], help="Aggregated category scores over a period")
    category.add_argument("--max-cols", type=int, default=5, help="Max columns for the table output")

    tickets = sub.add_parser("ticket-scores", parents=[common], help="Category scores by ticket")
    tickets.add_argument("--max-rows", type=int, default=5, help="Max rows for the table output")

    sub.add_parser("overall-score", parents=[common], help="Overall quality score for a period")

    diff = sub.add_parser("period-diff", parents=[common], help="Score change from one period to another")
    diff.add_argument("--second-from", type=parse_date, default="2019-04-01", help="Start date of the second period")
    diff.add_argument("--second-to", type=parse_date, default="2019-04-30", help="End date of the second period")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        run_command(args)
    except ClientError as exc:
        CONSOLE.print(f"[red]✘ {exc}[/]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
