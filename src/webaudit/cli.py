"""Command line interface for the web audit engine."""

from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional, Sequence

from .core.config import load_configuration
from .core.dependencies import verify_dependencies
from .engine.orchestrator import ScanOrchestrator


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Web Audit Scanner")
    parser.add_argument("-u", "--url", help="URL do alvo")
    parser.add_argument("--checks", default="*", help="Checks a carregar, separados por vírgula (padrão: todos)")
    parser.add_argument("--reports", default="json,stdout", help="Relatórios a gerar, separados por vírgula")
    parser.add_argument("--plugins", default="", help="Plugins a executar, separados por vírgula")
    parser.add_argument("--report", default="webaudit_report.json", help="Arquivo de saída do relatório JSON")
    parser.add_argument("--dom-depth-limit", type=int, help="Profundidade máxima de transições DOM")
    parser.add_argument("--page-limit", type=int, help="Número máximo de páginas a auditar")
    parser.add_argument("--restrict-path", action="append", default=[], help="Audita somente este caminho (repetível)")
    parser.add_argument("--exclude", action="append", default=[], help="Regex de URLs a ignorar (repetível)")
    parser.add_argument("--browser-pool-size", type=int, help="Quantidade de navegadores em paralelo")
    parser.add_argument("--verbose", action="store_true", help="Exibe logs de depuração")
    parser.add_argument("--list-checks", action="store_true", help="Lista os checks disponíveis")
    parser.add_argument("--list-reports", action="store_true", help="Lista os relatórios disponíveis")
    parser.add_argument("--list-plugins", action="store_true", help="Lista os plugins disponíveis")
    parser.add_argument("--list-platforms", action="store_true", help="Lista as plataformas reconhecidas")
    args = parser.parse_args(argv)

    listing = args.list_checks or args.list_reports or args.list_plugins or args.list_platforms
    if not listing and not args.url:
        parser.error("o argumento -u/--url é obrigatório")
    return args


def print_dependency_status() -> bool:
    status = verify_dependencies()
    for name, ok in status.items():
        print(f"[{'+' if ok else '!'}] {name} {'encontrado' if ok else 'não encontrado'}")
    if not all(status.values()):
        print("[!] Navegador indisponível: a análise DOM/JavaScript será ignorada.")
    return all(status.values())


def print_components(title: str, components: List[dict]) -> None:
    print(f"\n=== {title} ===")
    if not components:
        print(" - Nenhum componente encontrado.")
        return
    for component in components:
        print(f" - {component['shortname']}: {component.get('description', '')}")


def print_platforms(platforms: Dict[str, Dict[str, str]]) -> None:
    print("\n=== Plataformas ===")
    for kind, entries in platforms.items():
        print(f"{kind}:")
        for shortname, name in entries.items():
            print(f" - {shortname}: {name}")


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_configuration(
        args.url or "http://localhost",
        args.report,
        dom_depth_limit=args.dom_depth_limit,
        page_limit=args.page_limit,
        browser_pool_size=args.browser_pool_size,
        restrict_paths=args.restrict_path,
        exclude_path_patterns=args.exclude,
        checks=_split(args.checks),
        reports=_split(args.reports),
        plugins=_split(args.plugins),
    )

    if args.list_checks or args.list_reports or args.list_plugins or args.list_platforms:
        orchestrator = ScanOrchestrator(config)
        if args.list_checks:
            print_components("Checks", orchestrator.list_checks())
        if args.list_reports:
            print_components("Relatórios", orchestrator.list_reports())
        if args.list_plugins:
            print_components("Plugins", orchestrator.list_plugins())
        if args.list_platforms:
            print_platforms(orchestrator.list_platforms())
        return 0

    print("[*] Verificando dependências...")
    print_dependency_status()

    print("\n=== [1/3] Preparação ===")
    orchestrator = ScanOrchestrator(config)
    print(f"[+] Checks carregados: {', '.join(orchestrator.checks.loaded) or 'nenhum'}")

    print("\n=== [2/3] Crawl e Auditoria ===")
    try:
        store = orchestrator.run()
    except KeyboardInterrupt:
        print("[!] Execução interrompida pelo usuário")
        orchestrator.clean_up()
        return 130

    print("\n=== [3/3] Resultado ===")
    stats = orchestrator.stats()
    print(f"[+] Páginas auditadas: {stats['auditmap_size']} de {stats['sitemap_size']}")
    print(f"[+] Vulnerabilidades: {len(store.issues)}")
    if orchestrator.platforms:
        print(f"[+] Plataformas identificadas: {', '.join(orchestrator.platforms)}")
    if orchestrator.failures:
        print(f"[!] Páginas sem resposta: {len(orchestrator.failures)}")
        for url in orchestrator.failures:
            print(f" - {url}")
    if "json" in orchestrator.reports:
        print(f"[+] Relatório salvo em {config.report_path}")
    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
