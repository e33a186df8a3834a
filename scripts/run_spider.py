"""Helper script to execute the spider in isolation.

Crawls a single URL without auditing anything and prints what it found.
Useful for quick smoke tests or debugging the crawl stage.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

# Guarantee imports resolve to the local source tree when running from a checkout.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH.exists():
    src_str = str(SRC_PATH)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)

from webaudit.auth.session import Session
from webaudit.core.config import load_configuration
from webaudit.http.client import HttpClient
from webaudit.recon.crawler import Spider


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Executa somente o crawler (Spider) em uma URL alvo"
    )
    parser.add_argument(
        "url",
        help="URL base do alvo. Utilize apenas ambientes sob sua autorização",
    )
    parser.add_argument(
        "--page-limit",
        type=int,
        help="Número máximo de páginas a visitar",
    )
    parser.add_argument(
        "--session-cookie",
        help="Cookie de sessão (nome=valor) para reutilizar uma conta autenticada",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_arguments()

    config = load_configuration(target_url=args.url, page_limit=args.page_limit)
    if args.session_cookie:
        config.session_cookie = args.session_cookie

    http = HttpClient(timeout=config.http_timeout)
    Session(config, http).apply_session_cookie()
    spider = Spider(config, http)

    discovered = []
    print(f"[*] Iniciando crawler para {config.target_url}")
    try:
        state = spider.run(lambda page: discovered.append((page.code, page.url)))
    except KeyboardInterrupt:
        print("[!] Execução interrompida pelo usuário")
        return

    for code, url in discovered:
        print(f" - [{code}] {url}")
    print(f"    URLs visitadas          : {state.visited_count}")
    print(f"    URLs sem resposta       : {len(state.failed_urls)}")


if __name__ == "__main__":
    main()
