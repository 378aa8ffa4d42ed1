"""Storage statistics commands."""

import click


@click.group()
def storage() -> None:
    """Storage usage statistics."""
    pass


@storage.command("info")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def storage_info(as_json: bool) -> None:
    """Show model count and byte totals."""
    import json

    from grocery_ml.cli.progress import print_summary
    from grocery_ml.cli.service_helpers import handle_result, services

    info = handle_result(services.storage.get_storage_info())

    if as_json:
        click.echo(json.dumps(info.to_dict(), indent=2))
        return

    print_summary(
        "Storage",
        {
            "Models": info.total_models,
            "Total size (bytes)": info.total_size,
            "Available (bytes)": info.available_space,
        },
    )


@storage.command("summary")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def storage_summary(as_json: bool) -> None:
    """Show storage totals in GB/MB."""
    import json

    from grocery_ml.cli.progress import console
    from grocery_ml.cli.service_helpers import handle_result, services

    summary = handle_result(services.storage.get_storage_summary())

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return

    console.print(f"Models:             {summary.total_models}")
    console.print(f"Total size:         {summary.total_size_gb} GB")
    console.print(f"Available space:    {summary.available_space_gb} GB")
    console.print(f"Average model size: {summary.average_model_size_mb} MB")


@storage.command("model")
@click.argument("model_id")
def storage_model(model_id: str) -> None:
    """Show the on-disk footprint of one model."""
    from grocery_ml.cli.progress import print_table
    from grocery_ml.cli.service_helpers import handle_result, services

    info = handle_result(services.storage.get_model_info(model_id))

    print_table(
        f"{model_id}: {info.file_count} files, {info.size} bytes",
        ["File"],
        [[name] for name in info.files],
    )
