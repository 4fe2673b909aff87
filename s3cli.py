import json
import logging
import sys

import click
import yaml

from s3client.config import client_from_config, load_config


def format_output(data, fmt):
    if fmt == 'yaml':
        click.echo(yaml.safe_dump(data, sort_keys=False))
    else:
        click.echo(json.dumps(data, indent=2))


def _check(result):
    """Exit with the server's error when an operation failed."""
    if not result:
        err = result.error
        click.echo(f"{err.code}: {err.message}", err=True)
        sys.exit(1)
    return result


@click.group(context_settings=dict(help_option_names=['--help']))
@click.option('--profile', required=True, help='Profile name from .config.yaml')
@click.option('--config', 'config_path', default='.config.yaml',
              help='Path to configuration file')
@click.option('--format', 'outfmt', default='json', type=click.Choice(['json', 'yaml']))
@click.option('--verbose', is_flag=True, help='Log requests and signing details')
@click.pass_context
def cli(ctx, profile, config_path, outfmt, verbose):
    """Manage Amazon S3 buckets with SigV4-signed requests."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    try:
        conf = load_config(profile, config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        click.echo(f"Error loading config: {e}", err=True)
        sys.exit(1)

    ctx.obj = {
        'profile': profile,
        'conf': conf,
        'client': client_from_config(conf),
        'outfmt': outfmt,
    }


@cli.command('buckets')
@click.pass_context
def buckets_cmd(ctx):
    """List the buckets owned by the account."""
    result = _check(ctx.obj['client'].buckets())
    format_output(result.value.to_dict(), ctx.obj['outfmt'])


@cli.command('create-bucket')
@click.argument('bucket_name')
@click.option('--acl', default=None, help='Canned ACL, e.g. private or public-read')
@click.option('--location', default=None, help='Location constraint (region)')
@click.pass_context
def create_bucket_cmd(ctx, bucket_name, acl, location):
    """Create a bucket."""
    try:
        result = ctx.obj['client'].add_bucket(bucket_name, acl_short=acl,
                                              location_constraint=location)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--acl')
    _check(result)
    format_output({'success': True, 'bucket': bucket_name}, ctx.obj['outfmt'])


@cli.command('delete-bucket')
@click.argument('bucket_name')
@click.pass_context
def delete_bucket_cmd(ctx, bucket_name):
    """Delete an empty bucket."""
    _check(ctx.obj['client'].delete_bucket(bucket_name))
    format_output({'success': True, 'bucket': bucket_name}, ctx.obj['outfmt'])


@cli.command('list-objects')
@click.argument('bucket_name')
@click.option('--prefix', default=None, help='Filter prefix')
@click.option('--delimiter', default=None, help='Group keys sharing a prefix up to this')
@click.option('--max-keys', type=int, default=None, help='Page size')
@click.option('--marker', default=None, help='Start listing after this key')
@click.option('--all', 'fetch_all', is_flag=True, help='Follow pages until the listing ends')
@click.pass_context
def list_objects_cmd(ctx, bucket_name, prefix, delimiter, max_keys, marker, fetch_all):
    """List objects in a bucket, optionally filtered by prefix."""
    client = ctx.obj['client']
    if fetch_all:
        result = client.list_bucket_all(bucket_name, prefix=prefix, delimiter=delimiter,
                                        max_keys=max_keys, marker=marker)
    else:
        result = client.list_bucket(bucket_name, prefix=prefix, delimiter=delimiter,
                                    max_keys=max_keys, marker=marker)
    _check(result)
    format_output(result.value.to_dict(), ctx.obj['outfmt'])


@cli.command('put-file')
@click.argument('bucket_name')
@click.argument('key')
@click.argument('filename', type=click.Path(exists=True, dir_okay=False))
@click.option('--content-type', default=None)
@click.option('--unsigned', is_flag=True, help='Send the body as UNSIGNED-PAYLOAD')
@click.pass_context
def put_file_cmd(ctx, bucket_name, key, filename, content_type, unsigned):
    """Upload a file, checking for a redirect before the body is sent."""
    headers = {'Content-Type': content_type} if content_type else None
    _check(ctx.obj['client'].put_file(bucket_name, key, filename, headers=headers,
                                      unsigned=unsigned))
    format_output({'success': True, 'bucket': bucket_name, 'key': key}, ctx.obj['outfmt'])


if __name__ == '__main__':
    cli()
