#!/usr/bin/env python3
"""
sqlbatch – run SQL scripts against one or more databases.

• Inline SQL:        sqlbatch run --url mysql://db/app --sql "DELETE FROM tmp"
• Explicit files:    sqlbatch run -f schema.sql -f seed.sql
• Whole directories: sqlbatch run --fileset-dir db/ --include "**/*.sql" --order-file ascending
• Preview:           sqlbatch split --delimiter GO --delimiter-type row proc.sql

Every option can also live in *sqlbatch.config.yml* (see `sqlbatch.config`),
command‑line values win.
"""
from __future__ import annotations

import logging
import pathlib
import sys
import typing as t

import click
import sqlparse

from sqlbatch import __version__
from sqlbatch.config import ExecConfig, load
from sqlbatch.errors import ConfigError, RunFailed, SqlBatchError
from sqlbatch.execution import ExecutionRunner
from sqlbatch.parser import DelimiterConfig, split_statements
from sqlbatch.sources import FilePath

_LOG_FORMAT = "[sqlbatch] %(levelname)s %(message)s"


def _load_cfg(ctx: click.Context, overrides: dict[str, t.Any]) -> ExecConfig:
    try:
        return load(ctx.obj["config_path"], ctx.obj["env"], overrides)
    except ConfigError as exc:
        click.echo(f"Config error: {exc}", err=True)
        sys.exit(1)


def _key_values(_ctx, _param, value) -> dict[str, str] | None:
    if not value:
        return None
    props: dict[str, str] = {}
    for item in value:
        key, sep, val = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {item!r}")
        props[key] = val
    return props


def _parser_opts(fn):
    opts = [
        click.option("--delimiter", help="statement delimiter (default ';')"),
        click.option("--delimiter-type", help="normal | row"),
        click.option("--keep-format/--no-keep-format", default=None),
        click.option("--encoding", help="encoding of script files"),
    ]
    for opt in reversed(opts):
        fn = opt(fn)
    return fn


@click.group()
@click.option("-c", "--config", "config_path", type=click.Path(), help="config YAML")
@click.option("-e", "--env", help="profile inside the config file")
@click.option("-v", "--verbose", is_flag=True, help="log every statement")
@click.option("-q", "--quiet", is_flag=True, help="only log warnings and errors")
@click.pass_context
def main(ctx, config_path, env, verbose, quiet):
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    ctx.obj = {
        "config_path": pathlib.Path(config_path) if config_path else None,
        "env": env,
    }


@main.command()
def version():
    click.echo(__version__)


@main.command("run")
@click.option("--url", help="database url")
@click.option("--urls", help="whitespace separated list of urls, wins over --url")
@click.option("--driver", help="DB-API module, e.g. mysql.connector or sqlite3")
@click.option("-u", "--username")
@click.option("-p", "--password")
@click.option("--settings-key", help="settings-store key (default: the url)")
@click.option("--settings-file", type=click.Path(dir_okay=False), help="credential store YAML")
@click.option("--driver-properties", help="key=value,key=value passed to connect()")
@click.option("--skip-on-connection-error/--no-skip-on-connection-error", default=None)
@click.option("--sql", "sql_command", help="inline SQL commands")
@click.option("-f", "--src-file", "src_files", multiple=True, type=click.Path(dir_okay=False))
@click.option("--fileset-dir", type=click.Path(file_okay=False))
@click.option("--include", "includes", multiple=True, help="glob below --fileset-dir")
@click.option("--exclude", "excludes", multiple=True, help="glob below --fileset-dir")
@click.option("--order-file", help="ascending | descending")
@click.option("--on-error", help="abort | abortAfter | continue")
@click.option("--autocommit/--no-autocommit", default=None)
@click.option("--block-mode/--no-block-mode", default=None, help="one statement per source")
@_parser_opts
@click.option("--print-result-set/--no-print-result-set", default=None)
@click.option("--show-headers/--no-show-headers", default=None)
@click.option("-o", "--output-file", type=click.Path(dir_okay=False))
@click.option("--output-delimiter")
@click.option("--append/--no-append", default=None)
@click.option("--filtering/--no-filtering", default=None, help="substitute ${...} in --src-file")
@click.option("-D", "filter_properties", multiple=True, callback=_key_values, help="name=value for filtering")
@click.option("--skip", is_flag=True, default=None)
@click.option("--dry-run", is_flag=True, help="print statements instead of executing them")
@click.pass_context
def run_cmd(ctx, **opts):
    fileset = None
    if opts["fileset_dir"]:
        fileset = {
            "basedir": opts["fileset_dir"],
            "includes": list(opts["includes"]) or None,
            "excludes": list(opts["excludes"]) or None,
        }
    cfg = _load_cfg(
        ctx,
        {
            "url": opts["url"],
            "urls": opts["urls"],
            "driver": opts["driver"],
            "username": opts["username"],
            "password": opts["password"],
            "settingsKey": opts["settings_key"],
            "settingsFile": opts["settings_file"],
            "driverProperties": opts["driver_properties"],
            "skipOnConnectionError": opts["skip_on_connection_error"],
            "sqlCommand": opts["sql_command"],
            "srcFiles": list(opts["src_files"]) or None,
            "fileset": fileset,
            "orderFile": opts["order_file"],
            "onError": opts["on_error"],
            "autocommit": opts["autocommit"],
            "enableBlockMode": opts["block_mode"],
            "delimiter": opts["delimiter"],
            "delimiterType": opts["delimiter_type"],
            "keepFormat": opts["keep_format"],
            "encoding": opts["encoding"],
            "printResultSet": opts["print_result_set"],
            "showheaders": opts["show_headers"],
            "outputFile": opts["output_file"],
            "outputDelimiter": opts["output_delimiter"],
            "append": opts["append"],
            "enableFiltering": opts["filtering"],
            "filterProperties": opts["filter_properties"],
            "skip": opts["skip"] or None,
        },
    )

    try:
        counters = ExecutionRunner(cfg).run(dry_run=opts["dry_run"])
    except RunFailed as exc:
        click.echo(f"Run failed: {exc} ({exc.counters.summary()})", err=True)
        sys.exit(1)
    except SqlBatchError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except (OSError, UnicodeError) as exc:
        click.echo(f"I/O error: {exc}", err=True)
        sys.exit(1)

    if not opts["dry_run"] and not cfg.skip:
        click.echo(f"✅  {counters.summary()}", err=True)


@main.command("split")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@_parser_opts
@click.option("--pretty", is_flag=True, help="re-indent statements")
@click.pass_context
def split_cmd(ctx, files, delimiter, delimiter_type, keep_format, encoding, pretty):
    cfg = _load_cfg(
        ctx,
        {
            "delimiter": delimiter,
            "delimiterType": delimiter_type,
            "keepFormat": keep_format,
            "encoding": encoding,
        },
    )
    delimiters = DelimiterConfig.from_config(cfg)
    for name in files:
        click.echo(f"-- {name}")
        try:
            statements = list(split_statements(FilePath(pathlib.Path(name), cfg.encoding).lines(), delimiters))
        except (OSError, UnicodeError) as exc:
            click.echo(f"I/O error: {name}: {exc}", err=True)
            sys.exit(1)
        for n, stmt in enumerate(statements, 1):
            if pretty:
                stmt = sqlparse.format(stmt, reindent=True, keyword_case="upper")
            click.echo(f"-- [{n}]")
            click.echo(stmt)
        click.echo()


if __name__ == "__main__":
    main()
