"""
MITAB commands for interolog
"""

import argparse
import json
import logging
from typing import List

from interolog.config import ConfigManager
from interolog.services.interaction_store import InteractionStore

logger = logging.getLogger("interolog.cli.mitab")

COMMANDS = {
    'stats': 'Summarize the interactions of MITAB files',
    'dump': 'Print the (filtered) interactions of MITAB files',
    'partners': 'List the interaction partners of each protein',
}


def setup_parser(parser: argparse.ArgumentParser) -> None:
    """Set up the argument parser for MITAB commands"""
    subparsers = parser.add_subparsers(dest='command', help='MITAB command')

    for name, help_text in COMMANDS.items():
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument('files', nargs='+', help='MITAB files to read')
        command_parser.add_argument('--check-publications', action='store_true',
                                    help='Reject records whose publication was already '
                                         'reported by another source')

    dump_parser = subparsers.choices['dump']
    dump_parser.add_argument('--uniprot', nargs='+', default=[],
                             help='Keep interactions involving these UniProt accessions')
    dump_parser.add_argument('--method', nargs='+', default=[],
                             help='Keep interactions detected with these PSI-MI codes (e.g. MI:0018)')

    partners_parser = subparsers.choices['partners']
    partners_parser.add_argument('--id', dest='identifier', help='Only show partners of this identifier')


def load_store(files: List[str], config_manager: ConfigManager,
               check_publications: bool = False) -> InteractionStore:
    """Read MITAB files into a single store"""
    store = InteractionStore.from_config(config_manager)

    for file_path in files:
        if not check_publications:
            store.read(file_path)
            continue

        incoming = InteractionStore(keep_raw=store.keep_raw, skip_comments=store.skip_comments)
        incoming.read(file_path)
        rejected = 0
        for record in incoming:
            if store.check_publication(record):
                store.add(record)
            else:
                rejected += 1
        if rejected:
            logger.warning(f"Rejected {rejected} records of {file_path} with conflicting publication source")

    return store


def run_command(args: argparse.Namespace, config_manager: ConfigManager) -> int:
    """Run the specified MITAB command"""
    store = load_store(args.files, config_manager, args.check_publications)

    if args.command == 'stats':
        return _stats(args, store)
    elif args.command == 'dump':
        return _dump(args, store)
    elif args.command == 'partners':
        return _partners(args, store)

    logger.error(f"Unknown command: {args.command}")
    return 1


def _stats(args: argparse.Namespace, store: InteractionStore) -> int:
    nodes, edges = store.topology()
    frame = store.to_dataframe()
    stats = {
        'pairs': len(store),
        'records': len(frame),
        'publications': len(store.publications()),
        'nodes': len(nodes),
        'edges': len(edges),
        'detection_methods': {method: int(count) for method, count
                              in frame['detection_method'].value_counts().items()},
    }

    if args.json:
        print(json.dumps(stats, indent=2))
    else:
        print(f"Pairs: {stats['pairs']}")
        print(f"Records: {stats['records']}")
        print(f"Publications: {stats['publications']}")
        print(f"Topology: {stats['nodes']} nodes, {stats['edges']} edges")
        for method, count in stats['detection_methods'].items():
            print(f"  {method}: {count}")
    return 0


def _dump(args: argparse.Namespace, store: InteractionStore) -> int:
    if args.uniprot or args.method:
        methods = set(args.method)
        predicate = (lambda record: record.interaction_detection_method in methods) if methods else None
        store = store.filter(args.uniprot, predicate)

    print(store.to_json() if args.json else store.dump())
    return 0


def _partners(args: argparse.Namespace, store: InteractionStore) -> int:
    partners = store.partners_of()
    if args.identifier:
        partners = {args.identifier: partners.get(args.identifier, set())}

    if args.json:
        print(json.dumps({identifier: sorted(ids) for identifier, ids in partners.items()}, indent=2))
    else:
        for identifier in sorted(partners):
            print(f"{identifier}\t{','.join(sorted(partners[identifier]))}")
    return 0
