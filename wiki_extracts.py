import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Iterable, Sequence, TextIO

import requests

logger = logging.getLogger(__name__)

API_URL = "https://bn.wikipedia.org/w/api.php"
MAX_REQUESTS_PER_HOUR = 5000


class LoginError(Exception):
    pass


class ExtractNotFound(Exception):
    pass


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        period: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.max_requests = max_requests
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._count = 0
        self._start = clock()

    def wait(self) -> None:
        if self._count >= self.max_requests:
            remaining = self.period - (self._clock() - self._start)
            if remaining > 0:
                logger.info("request budget spent, sleeping %.0fs", remaining)
                self._sleep(remaining)

            # Start a new window.
            self._count = 0
            self._start = self._clock()

        self._count += 1


class WikiClient:
    def __init__(
        self, session: requests.Session | None = None, api_url: str = API_URL
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.api_url = api_url

    def login(self, username: str, password: str) -> None:
        response = self.session.get(
            self.api_url,
            params={
                "action": "query",
                "meta": "tokens",
                "type": "login",
                "format": "json",
            },
        )
        response.raise_for_status()
        token = response.json()["query"]["tokens"]["logintoken"]

        response = self.session.post(
            self.api_url,
            data={
                "action": "login",
                "lgname": username,
                "lgpassword": password,
                "lgtoken": token,
                "format": "json",
            },
        )
        response.raise_for_status()
        result = response.json().get("login", {}).get("result")
        if result != "Success":
            raise LoginError(f"login failed: {result}")

    def fetch_extract(self, title: str) -> str:
        response = self.session.get(
            self.api_url,
            params={
                "format": "json",
                "action": "query",
                "prop": "extracts",
                "exintro": 1,
                "explaintext": 1,
                "redirects": 1,
                "titles": title,
            },
        )
        response.raise_for_status()
        pages = response.json().get("query", {}).get("pages", {})

        # Only one title is requested, so take the first page.
        extract = ""
        for page in pages.values():
            extract = page.get("extract", "").replace("\n", " ")
            break

        if not extract:
            raise ExtractNotFound(f"no extract found for title: {title}")

        return extract


def download_extracts(
    titles: Iterable[str],
    client: WikiClient,
    output: TextIO,
    limiter: RateLimiter | None = None,
) -> int:
    saved = 0
    for line in titles:
        if not (title := line.strip()):
            continue

        if limiter is not None:
            limiter.wait()

        try:
            extract = client.fetch_extract(title)
        except (requests.RequestException, ExtractNotFound, ValueError) as exc:
            logger.warning("error fetching extract for %s: %s", title, exc)
            continue

        output.write(f"{extract}\n")
        saved += 1
        logger.info("page %r fetched", title)

    return saved


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="wiki-extracts",
        description="Append Wikipedia intro extracts for a list of titles to a file.",
    )
    parser.add_argument(
        "--input", required=True, type=Path, help="file with one title per line"
    )
    parser.add_argument(
        "--output", required=True, type=Path, help="file to append extracts to"
    )
    parser.add_argument("--username", required=True, help="bot username")
    parser.add_argument("--password", required=True, help="bot password")
    parser.add_argument("--api-url", default=API_URL)
    parser.add_argument("--max-requests", type=int, default=MAX_REQUESTS_PER_HOUR)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    client = WikiClient(api_url=args.api_url)
    try:
        client.login(args.username, args.password)
    except (requests.RequestException, LoginError, KeyError, ValueError) as exc:
        print(f"error: login failed: {exc}", file=sys.stderr)
        return 1

    try:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with (
            open(args.input, encoding="utf-8") as titles,
            open(args.output, "a", encoding="utf-8") as output,
        ):
            saved = download_extracts(
                titles, client, output, RateLimiter(args.max_requests)
            )
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.info("%d extracts saved to %s", saved, args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
