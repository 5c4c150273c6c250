"""
repopacker CLI: pack a local directory or GitHub repository into one document.

- Local directories and GitHub URLs
- Configuration file support (repopacker.config.json / repomix.config.json)
- Presets and predefined prompts
- Statistics and dry-run reporting
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple

import pyperclip

from ..constants import GITIGNORE_FILENAME, PREDEFINED_PROMPTS, PRESET_FILTERS, REPOMIXIGNORE_FILENAME
from ..config_manager import ConfigManager
from ..library import RepositoryPacker, build_pattern_set
from ..packer.matcher import PathMatcher
from ..packer.tokenizer import TokenEstimator, get_tokenizer
from ..packer.types import PackOptions, PackResult
from ..sources.base import EntrySource
from ..sources.github import DEFAULT_BATCH_SIZE, GitHubReference, GitHubSource
from ..sources.local import LocalDirectorySource
from ..utils.error_handling import PackRepoError


logger = logging.getLogger(__name__)


class RepoPackCLI:
    """Command-line interface for repository packing."""

    def __init__(self):
        self.options: Optional[PackOptions] = None
        self.output_path: Optional[Path] = None

    def create_parser(self) -> argparse.ArgumentParser:
        """Create command-line argument parser."""
        parser = argparse.ArgumentParser(
            prog='repopack',
            description='Pack a repository into a single document for LLM consumption'
        )

        parser.add_argument(
            'source',
            type=str,
            help='Local directory or GitHub URL (https://github.com/owner/repo[/tree/branch[/path]])'
        )

        parser.add_argument(
            '--output', '-o',
            type=Path,
            help='Output file path (default: stdout)'
        )

        # Patterns
        parser.add_argument(
            '--ignore', '-i',
            action='append',
            help='Ignore patterns, comma separated; prefix with ! to re-include (repeatable)'
        )

        parser.add_argument(
            '--preset',
            choices=sorted(PRESET_FILTERS),
            help='Apply a predefined filter preset'
        )

        parser.add_argument(
            '--no-gitignore',
            action='store_true',
            help='Disable .gitignore pattern usage'
        )

        parser.add_argument(
            '--no-repomixignore',
            action='store_true',
            help='Disable .repomixignore pattern usage'
        )

        parser.add_argument(
            '--no-default-patterns',
            action='store_true',
            help='Disable built-in ignore patterns'
        )

        parser.add_argument(
            '--no-binary-detection',
            action='store_true',
            help='Keep files that look binary (media types, NUL bytes)'
        )

        # Output format options
        parser.add_argument(
            '--prompt',
            type=str,
            help='Instruction text placed before the packed repository'
        )

        parser.add_argument(
            '--prompt-id',
            choices=sorted(PREDEFINED_PROMPTS),
            help='Use a predefined instruction prompt'
        )

        parser.add_argument(
            '--no-file-tree',
            action='store_true',
            help='Omit the file tree block'
        )

        parser.add_argument(
            '--files-first',
            action='store_true',
            help='List files before folders in the file tree'
        )

        parser.add_argument(
            '--remove-comments',
            action='store_true',
            help='Accepted for compatibility; contents are not modified'
        )

        parser.add_argument(
            '--tokenizer',
            choices=['heuristic', 'cl100k_base', 'o200k_base'],
            default='heuristic',
            help='Token estimator (default: heuristic, chars / 4)'
        )

        # Configuration
        parser.add_argument(
            '--config', '-c',
            type=Path,
            help='Configuration file path'
        )

        # Remote repository options
        parser.add_argument(
            '--token',
            type=str,
            default=os.environ.get('GITHUB_TOKEN'),
            help='GitHub token for API requests (default: $GITHUB_TOKEN)'
        )

        parser.add_argument(
            '--batch-size',
            type=int,
            default=DEFAULT_BATCH_SIZE,
            help=f'Concurrent file fetches for GitHub sources (default: {DEFAULT_BATCH_SIZE})'
        )

        parser.add_argument(
            '--prune',
            action='store_true',
            help='Skip ignored directories while walking a local source'
        )

        # Reporting
        parser.add_argument(
            '--stats',
            action='store_true',
            help='Print pack statistics as JSON to stderr'
        )

        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show which files would be kept or ignored without packing'
        )

        parser.add_argument(
            '--copy',
            action='store_true',
            help='Copy output to clipboard'
        )

        parser.add_argument(
            '--verbose', '-v',
            action='store_true',
            help='Enable verbose output'
        )

        return parser

    def _resolve_source(self, source: str, args: argparse.Namespace) -> Tuple[EntrySource, Optional[Path]]:
        """
        Create the entry source for a local path or GitHub URL.

        Returns:
            (source, local_root) where local_root is None for remote sources
        """
        local_path = Path(source)
        if local_path.exists():
            root = local_path.resolve()
            return LocalDirectorySource(root, prune_ignored_dirs=args.prune), root

        if GitHubReference.is_github_url(source):
            if args.verbose:
                print(f"Reading GitHub repository: {source}", file=sys.stderr)
            return GitHubSource(source, token=args.token, batch_size=args.batch_size), None

        raise PackRepoError(f"Repository path does not exist and is not a GitHub URL: {source}")

    def build_options(self, args: argparse.Namespace, repo_root: Optional[Path]) -> PackOptions:
        """Load configuration, then let CLI arguments override it."""
        config_manager = ConfigManager(repo_root)
        options = config_manager.load_config(args.config)
        if config_manager.output_file_path:
            self.output_path = Path(config_manager.output_file_path)

        overrides = {}
        if args.ignore:
            overrides['ignore_patterns'] = list(args.ignore)
        if args.preset:
            overrides['preset'] = args.preset
        if args.no_gitignore:
            overrides['use_gitignore'] = False
        if args.no_repomixignore:
            overrides['use_repomixignore'] = False
        if args.no_default_patterns:
            overrides['use_default_patterns'] = False
        if args.no_binary_detection:
            overrides['detect_binary'] = False
        if args.no_file_tree:
            overrides['include_file_tree'] = False
        if args.files_first:
            overrides['folders_first'] = False
        if args.remove_comments:
            overrides['remove_comments'] = True
        if args.prompt:
            overrides['prepend_prompt'] = args.prompt
        elif args.prompt_id:
            overrides['prepend_prompt'] = PREDEFINED_PROMPTS[args.prompt_id] or None

        return replace(options, **overrides)

    def dry_run(self, source: EntrySource, options: PackOptions) -> int:
        """Print the keep/ignore decision for every listed path."""
        gitignore = source.read_ignore_file(GITIGNORE_FILENAME) if options.use_gitignore else None
        repomixignore = (
            source.read_ignore_file(REPOMIXIGNORE_FILENAME) if options.use_repomixignore else None
        )
        matcher = PathMatcher(build_pattern_set(options, gitignore, repomixignore))

        kept = 0
        for path in source.list_paths(matcher.rules):
            rule = matcher.deciding_rule(path)
            if matcher.is_ignored(path):
                print(f"  - {path} (ignored by '{rule.raw}')")
            else:
                kept += 1
                suffix = f" (re-included by '{rule.raw}')" if rule is not None else ""
                print(f"  + {path}{suffix}")

        print(f"Dry run - would keep {kept} files by pattern", file=sys.stderr)
        return 0

    def write_output(self, result: PackResult, args: argparse.Namespace):
        output_path = args.output or self.output_path
        if output_path:
            with open(output_path, 'w', encoding='utf-8', newline='') as f:
                f.write(result.document)
            print(f"Pack written to {output_path}", file=sys.stderr)
        else:
            sys.stdout.write(result.document)
            sys.stdout.write("\n")

        if args.copy and self._copy_to_clipboard(result.document):
            print("Output copied to clipboard", file=sys.stderr)

    def _copy_to_clipboard(self, content: str) -> bool:
        """Copy content to clipboard if a clipboard mechanism is available."""
        try:
            pyperclip.copy(content)
            return True
        except pyperclip.PyperclipException as e:
            logger.warning(f"Cannot copy to clipboard: {e}")
            return False

    def output_statistics(self, result: PackResult, args: argparse.Namespace):
        stats = result.stats
        if stats.token_level != "ok":
            logger.warning(
                f"Estimated {stats.estimated_token_count:,} tokens "
                f"exceeds the {stats.token_level} threshold"
            )
        if args.stats:
            print(json.dumps(result.to_dict() if args.verbose else stats.to_dict(), indent=2),
                  file=sys.stderr)

    def run(self, args: Optional[List[str]] = None) -> int:
        """Main CLI entry point."""
        parser = self.create_parser()
        parsed_args = parser.parse_args(args)

        logging.basicConfig(
            level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
            format='%(levelname)s %(name)s: %(message)s',
        )

        try:
            source, repo_root = self._resolve_source(parsed_args.source, parsed_args)
            options = self.build_options(parsed_args, repo_root)
            self.options = options

            if parsed_args.dry_run:
                return self.dry_run(source, options)

            estimator = TokenEstimator(get_tokenizer(parsed_args.tokenizer))
            result = RepositoryPacker(estimator).pack_source(source, options)

            self.write_output(result, parsed_args)
            self.output_statistics(result, parsed_args)
            return 0

        except (PackRepoError, ValueError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            if parsed_args.verbose:
                import traceback
                traceback.print_exc()
            return 1


def create_cli() -> RepoPackCLI:
    """Create CLI instance."""
    return RepoPackCLI()


def main() -> int:
    """Main entry point for CLI."""
    cli = create_cli()
    return cli.run()


if __name__ == '__main__':
    sys.exit(main())
