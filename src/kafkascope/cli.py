"""CLI interface for inspecting and exercising a Kafka cluster."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import click
from click.core import ParameterSource
from confluent_kafka import KafkaException

from kafkascope import __version__
from kafkascope.config import AppConfig, ConnectConfig
from kafkascope.console import Console
from kafkascope.consumers import ExclusiveJoin, GroupJoin, OffsetBound, ReadStrategy, TimeBound
from kafkascope.exceptions import InvalidArgumentError, KafkaScopeError
from kafkascope.logging_config import configure_logging
from kafkascope.producers import InteractiveProducer
from kafkascope.session import ClusterSession
from kafkascope.utils.parsing import parse_delimiter, parse_headers, parse_time

logger = logging.getLogger(__name__)

MODES = "describe, topics, create, delete, write, publish, read-range, read-time, read-group, read-exclusive"

# CLI option name -> ConnectConfig field
CONNECT_OPTIONS = {
    "auth_key": "api_key",
    "auth_secret": "api_secret",
    "tls": "tls",
    "tls_no_verify": "skip_tls_verify",
    "scram": "scram",
    "timeout": "timeout_ms",
}


@dataclass
class CommandContext:
    """State shared by the subcommands of one invocation."""

    config: AppConfig
    session: ClusterSession
    console: Console


def _explicit(ctx: click.Context, name: str) -> bool:
    """Whether an option was given rather than left at its default."""
    return ctx.get_parameter_source(name) in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT)


def _fail(ctx: click.Context, what: str, error: Exception, **context) -> None:
    """Log a terminal error with its context and end the process."""
    logger.error(f"Error {what}: {error}", extra=context)
    ctx.obj.console.failed(f"unable to {what}")
    ctx.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="kafkascope")
@click.option("--bootstrap-servers", "-b", default="localhost:9092",
              help="Comma separated list of bootstrap servers")
@click.option("--config", "-c", type=click.Path(exists=True, readable=True),
              help="Configuration file path (JSON format)")
@click.option("--auth-key", help="API key or username to authenticate with, if required")
@click.option("--auth-secret", help="API secret or password to authenticate with, if required")
@click.option("--tls", is_flag=True, help="Connect with TLS")
@click.option("--tls-no-verify", is_flag=True, help="Skip TLS certificate verification (insecure)")
@click.option("--scram", is_flag=True, help="Authenticate with SCRAM-SHA-512 instead of PLAIN")
@click.option("--timeout", type=int, default=5000, help="Connection timeout in ms")
@click.option("--log", "log_file", default="./kafkascope.log", help="Log file path")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default="INFO", help="Log level")
@click.option("--json-logs", is_flag=True, help="Write logs as JSON lines")
@click.option("--verbose", "-v", is_flag=True, help="Also log to stderr")
@click.option("--unattended", is_flag=True,
              help="Run in a pipe-compatible manner: no prompts, values only, "
                   "delimited by --delimiter")
@click.option("--delimiter", default="\n",
              help="Single character separating values (and keys) on stdin/stdout "
                   "in unattended mode, default newline")
@click.pass_context
def cli(ctx, bootstrap_servers, config, auth_key, auth_secret, tls, tls_no_verify, scram,
        timeout, log_file, log_level, json_logs, verbose, unattended, delimiter):
    """Inspect and exercise a Kafka cluster.

    Select exactly one mode per invocation.
    """
    if ctx.invoked_subcommand is None:
        raise click.UsageError(f"Specify a mode: {MODES}")

    try:
        app_config = AppConfig.from_file(config) if config else AppConfig()
    except (OSError, ValueError) as e:
        # json.JSONDecodeError and pydantic.ValidationError are ValueErrors
        raise click.UsageError(f"Invalid configuration: {e}")

    if _explicit(ctx, "log_file"):
        app_config.log_file = log_file
    if _explicit(ctx, "log_level"):
        app_config.log_level = log_level

    configure_logging(
        level=app_config.log_level,
        json_format=json_logs,
        log_file=app_config.log_file or None,
        console=verbose,
    )

    connect_settings = app_config.connect.model_dump()
    for option, field_name in CONNECT_OPTIONS.items():
        if _explicit(ctx, option):
            connect_settings[field_name] = ctx.params[option]

    try:
        if _explicit(ctx, "bootstrap_servers"):
            app_config.bootstrap_servers = bootstrap_servers
        if _explicit(ctx, "delimiter"):
            app_config.delimiter = parse_delimiter(delimiter)
        servers = app_config.bootstrap_list
        connect_config = ConnectConfig(**connect_settings)
    except (InvalidArgumentError, ValueError) as e:
        raise click.UsageError(str(e))

    logger.info(f"Starting using bootstrap servers: [{','.join(servers)}]")

    session = ClusterSession(servers, connect_config)
    ctx.call_on_close(session.close)

    ctx.obj = CommandContext(
        config=app_config,
        session=session,
        console=Console(
            date_format=app_config.date_format,
            unattended=unattended,
            delimiter=app_config.delimiter,
        ),
    )


@cli.command()
@click.pass_context
def describe(ctx):
    """Describe the brokers and the topic partitions they lead."""
    obj: CommandContext = ctx.obj
    try:
        brokers = obj.session.describe()
    except KafkaScopeError as e:
        _fail(ctx, "describe cluster", e, bootstrap_servers=",".join(obj.session.bootstrap_servers))
        return

    obj.console.describe(brokers, obj.session.bootstrap_servers)


@cli.command()
@click.pass_context
def topics(ctx):
    """List topics with their partition count, replica count and leader."""
    obj: CommandContext = ctx.obj
    try:
        summaries = obj.session.topics()
    except KafkaScopeError as e:
        _fail(ctx, "list topics", e, bootstrap_servers=",".join(obj.session.bootstrap_servers))
        return

    obj.console.topics(summaries)


@cli.command()
@click.argument("topic")
@click.option("--partitions", type=click.IntRange(min=1), default=6, help="Number of partitions")
@click.option("--replicas", type=click.IntRange(min=1), default=3, help="Number of replicas per partition")
@click.pass_context
def create(ctx, topic, partitions, replicas):
    """Create TOPIC with the given partitions and replicas."""
    obj: CommandContext = ctx.obj
    try:
        obj.session.create_topic(topic, partitions, replicas)
    except KafkaScopeError as e:
        _fail(ctx, f"create topic '{topic}'", e, topic=topic, partitions=partitions, replicas=replicas)
        return

    obj.console.created(topic)


@cli.command()
@click.argument("topic")
@click.pass_context
def delete(ctx, topic):
    """Delete TOPIC."""
    obj: CommandContext = ctx.obj
    try:
        obj.session.delete_topic(topic)
    except KafkaScopeError as e:
        _fail(ctx, f"delete topic '{topic}'", e, topic=topic)
        return

    obj.console.deleted(topic)


@cli.command()
@click.argument("topic")
@click.option("--keyed", is_flag=True,
              help="Follow each value with a key. Attended, the key is prompted for; "
                   "unattended, it is the next delimited token")
@click.pass_context
def write(ctx, topic, keyed):
    """Write records read from stdin to TOPIC."""
    obj: CommandContext = ctx.obj
    try:
        writer = obj.session.writer(topic, keyed=keyed)
    except (KafkaScopeError, KafkaException) as e:
        _fail(ctx, f"write to topic '{topic}'", e, topic=topic)
        return

    producer = InteractiveProducer(click.get_text_stream("stdin"), obj.console)
    try:
        producer.run(writer, keyed=keyed)
    except KeyboardInterrupt:
        logger.info(f"Writing to topic '{topic}' interrupted")


@cli.command()
@click.argument("topic")
@click.option("--value", required=True, help="Record value")
@click.option("--key", default="", help="Record key")
@click.option("--headers", help="Comma separated key=value record headers")
@click.pass_context
def publish(ctx, topic, value, key, headers):
    """Write a single record to TOPIC."""
    obj: CommandContext = ctx.obj
    try:
        record_headers = parse_headers(headers)
    except InvalidArgumentError as e:
        raise click.BadParameter(str(e), param_hint="--headers")

    try:
        obj.session.publish(topic, key, value, record_headers)
    except (KafkaScopeError, KafkaException) as e:
        _fail(ctx, f"write to topic '{topic}'", e, topic=topic, key=key)
        return

    obj.console.published(topic, key)


def _read(ctx: click.Context, strategy: ReadStrategy, banner: str, **context) -> None:
    obj: CommandContext = ctx.obj
    obj.console.reading(banner)
    try:
        obj.session.read(strategy, obj.console.message)
    except KeyboardInterrupt:
        logger.info(f"Reading from topic '{strategy.topic}' interrupted", extra=context)
    except KafkaScopeError as e:
        _fail(ctx, f"read from topic '{strategy.topic}'", e, topic=strategy.topic, **context)


@cli.command("read-range")
@click.argument("topic")
@click.option("--partition", type=click.IntRange(min=0), default=0, help="Partition to read from")
@click.option("--offset-from", type=click.IntRange(min=0), default=0,
              help="Offset to start reading from, default the start of the partition")
@click.option("--offset-to", type=int, default=-1,
              help="Last offset to read, default read indefinitely")
@click.pass_context
def read_range(ctx, topic, partition, offset_from, offset_to):
    """Read an offset range of one partition of TOPIC."""
    to_offset = offset_to if offset_to >= 0 else None
    _read(
        ctx,
        OffsetBound(topic, partition, offset_from, to_offset),
        f"reading from partition {partition} of topic '{topic}' with from offset of "
        f"{offset_from} to {'end' if to_offset is None else to_offset}",
        partition=partition, offset_from=offset_from, offset_to=to_offset,
    )


@cli.command("read-time")
@click.argument("topic")
@click.option("--partition", type=click.IntRange(min=0), default=0, help="Partition to read from")
@click.option("--time-from", help="Time to start reading from, 'DD-MM-YYYY HH:MM:SS' UTC, default a minute ago")
@click.option("--time-to", help="Last time to read, 'DD-MM-YYYY HH:MM:SS' UTC, default read indefinitely")
@click.pass_context
def read_time(ctx, topic, partition, time_from, time_to):
    """Read a time range of one partition of TOPIC."""
    obj: CommandContext = ctx.obj
    date_format = obj.config.date_format
    try:
        from_time = (
            parse_time(time_from, date_format) if time_from
            else datetime.now(timezone.utc) - timedelta(minutes=1)
        )
        to_time = parse_time(time_to, date_format) if time_to else None
    except InvalidArgumentError as e:
        raise click.BadParameter(str(e))

    to_str = "end" if to_time is None else to_time.strftime(date_format)
    _read(
        ctx,
        TimeBound(topic, from_time, partition, to_time),
        f"reading from partition {partition} of topic '{topic}' for time range "
        f"'{from_time.strftime(date_format)}' to '{to_str}'",
        partition=partition, time_from=from_time.isoformat(), time_to=to_time.isoformat() if to_time else None,
    )


@cli.command("read-group")
@click.argument("topic")
@click.option("--group", "-g", required=True, help="Consumer group to join")
@click.pass_context
def read_group(ctx, topic, group):
    """Read TOPIC as a member of a consumer group, resuming its offsets."""
    try:
        strategy = GroupJoin(topic, group)
    except InvalidArgumentError as e:
        raise click.BadParameter(str(e), param_hint="--group")

    _read(
        ctx,
        strategy,
        f"reading from topic '{topic}' as part of consumer group '{group}'",
        group=group,
    )


@cli.command("read-exclusive")
@click.argument("topic")
@click.option("--new-only", is_flag=True, help="Read only records written after joining")
@click.pass_context
def read_exclusive(ctx, topic, new_only):
    """Read every partition of TOPIC as its only consumer."""
    strategy = ExclusiveJoin(topic, from_beginning=not new_only)
    _read(
        ctx,
        strategy,
        f"reading exclusively from topic '{topic}' as consumer group '{strategy.group}'",
        group=strategy.group,
    )


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
