"""Stored model management commands."""

import click


def _format_size(size_bytes: float) -> str:
    """Format bytes into human-readable size."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} PB"


@click.group()
def models() -> None:
    """List, inspect, export, import, and delete stored models."""
    pass


@models.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def models_list(as_json: bool) -> None:
    """List stored models, newest first."""
    import json

    from grocery_ml.cli.progress import console, print_table
    from grocery_ml.cli.service_helpers import handle_result, services

    infos = handle_result(services.models.list_models())

    if as_json:
        click.echo(json.dumps([info.to_dict() for info in infos], indent=2))
        return

    if not infos:
        console.print("No stored models.")
        return

    print_table(
        "Stored Models",
        ["ID", "Name", "Classes", "Images", "Accuracy", "Epochs", "Size", "Created"],
        [
            [
                info.id,
                info.name,
                len(info.classes),
                info.trained_images,
                f"{info.accuracy:.4f}",
                info.epochs,
                _format_size(info.size),
                info.created_at,
            ]
            for info in infos
        ],
    )


@models.command("show")
@click.argument("model_id")
def models_show(model_id: str) -> None:
    """Show metadata for a stored model."""
    from grocery_ml.cli.progress import print_summary
    from grocery_ml.cli.service_helpers import handle_result, services

    bundle = handle_result(services.models.get_model(model_id))
    meta = bundle.metadata

    print_summary(
        meta.model_name,
        {
            "ID": bundle.model_id,
            "Labels": ", ".join(meta.labels),
            "Trained images": meta.trained_images,
            "Epochs": meta.epochs,
            "Accuracy": meta.final_metrics.get("accuracy", 0.0),
            "Loss": meta.final_metrics.get("loss", 0.0),
            "Created": meta.created_at,
            "Weights": _format_size(bundle.weights_size),
        },
    )


@models.command("delete")
@click.argument("model_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
def models_delete(model_id: str, yes: bool) -> None:
    """Delete a stored model."""
    from grocery_ml.cli.progress import print_success
    from grocery_ml.cli.service_helpers import handle_result, services

    if not yes:
        click.confirm(f"Delete model {model_id}?", abort=True)

    handle_result(services.models.delete_model(model_id))
    print_success(f"Deleted model {model_id}")


@models.command("export")
@click.argument("model_id")
@click.option("--output", "-o", default=None, help="Output file (default: <model name>.zip)")
@click.option("--json", "as_json", is_flag=True, help="Print the JSON form instead of writing a ZIP")
def models_export(model_id: str, output: str, as_json: bool) -> None:
    """Export a stored model as a ZIP archive."""
    import json

    from grocery_ml.cli.progress import print_success, status
    from grocery_ml.cli.service_helpers import handle_result, services

    if as_json:
        export = handle_result(services.export.export_model(model_id, download=False))
        click.echo(json.dumps(export.payload, indent=2))
        return

    with status(f"Packaging {model_id}..."):
        result = services.export.write_archive(model_id, output)
    path = handle_result(result)
    print_success(f"Exported {model_id} to {path}")


@models.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def models_import(file: str) -> None:
    """Import a model from a JSON export file.

    FILE holds {"modelId": ..., "files": {...}, "metadata": {...}} as produced
    by 'models export --json' or the HTTP API.
    """
    import json
    from pathlib import Path

    from grocery_ml.cli.progress import print_success
    from grocery_ml.cli.service_helpers import exit_with_error, handle_result, services

    try:
        request = json.loads(Path(file).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        exit_with_error(f"Could not read {file}: {e}")

    if isinstance(request, dict) and "modelId" not in request and "id" in request:
        request["modelId"] = request["id"]

    bundle = handle_result(services.models.import_model(request))
    print_success(f"Imported model {bundle.model_id}")
