"""Training commands."""

import click


def _load_dataset(path: str):
    from grocery_ml.cli.service_helpers import handle_result, services

    return handle_result(services.training.load_dataset(path))


@click.group()
def train() -> None:
    """Validate datasets and run synthetic training."""
    pass


@train.command("run")
@click.argument("dataset", type=click.Path(exists=True))
@click.option("--seed", type=int, default=None, help="Random seed for a reproducible run")
@click.option("--no-delay", is_flag=True, help="Skip the simulated per-epoch delay")
@click.option("--quiet", "-q", is_flag=True, help="Hide the progress bar")
def train_run(dataset: str, seed: int, no_delay: bool, quiet: bool) -> None:
    """Train a model on DATASET and save it.

    DATASET is a JSON file ({"classes": [{"name": ..., "images": [...]}]})
    or a directory with one image subdirectory per class.
    """
    from grocery_ml.cli.progress import ProgressBar, print_success, print_summary
    from grocery_ml.cli.service_helpers import handle_result, services

    data = _load_dataset(dataset)
    training_svc = services.training

    with ProgressBar(description="Training", transient=True, disable=quiet) as bar:

        def on_progress(progress) -> None:
            bar.set_total(progress.total)
            bar.update(
                completed=progress.completed,
                description=f"Epoch {progress.completed}/{progress.total} "
                f"acc={progress.metrics.accuracy:.4f}",
            )

        training_svc.set_progress_callback(on_progress)
        outcome = handle_result(training_svc.train_sync(data, seed=seed, delay=not no_delay))

    metrics = outcome.metrics
    print_success(f"Trained model {outcome.model_id}")
    print_summary(
        "Final Metrics",
        {
            "Epochs": metrics.epoch,
            "Accuracy": metrics.accuracy,
            "Loss": metrics.loss,
            "Val accuracy": metrics.val_accuracy,
            "Val loss": metrics.val_loss,
            "Saved to": str(outcome.model_path),
        },
    )


@train.command("validate")
@click.argument("dataset", type=click.Path(exists=True))
def train_validate(dataset: str) -> None:
    """Check DATASET against the training rules without training."""
    from grocery_ml.cli.progress import print_success
    from grocery_ml.cli.service_helpers import handle_result, services

    data = _load_dataset(dataset)
    handle_result(services.training.validate(data))
    print_success(f"Dataset is valid: {data.num_classes} classes, {data.total_images} images")


@train.command("stats")
@click.argument("dataset", type=click.Path(exists=True))
def train_stats(dataset: str) -> None:
    """Show class and image counts for DATASET."""
    from grocery_ml.cli.progress import console, print_table
    from grocery_ml.cli.service_helpers import handle_result, services

    stats = handle_result(services.training.get_stats(_load_dataset(dataset)))

    print_table(
        "Class Distribution",
        ["Class", "Images"],
        [[c.class_name, c.image_count] for c in stats.class_distribution],
    )
    console.print(
        f"Total: {stats.total_images} images in {stats.total_classes} classes "
        f"(avg {stats.average_images_per_class}, min {stats.min_images}, max {stats.max_images})"
    )


@train.command("untrained")
@click.argument("dataset", type=click.Path(exists=True))
@click.option("--model-id", default=None, help="Model id (default: timestamp-based)")
@click.option("--seed", type=int, default=None, help="Random seed for the weights")
@click.option("--save/--no-save", default=True, help="Save the generated model")
def train_untrained(dataset: str, model_id: str, seed: int, save: bool) -> None:
    """Generate a model for DATASET without running the epoch loop."""
    from grocery_ml.cli.progress import print_success
    from grocery_ml.cli.service_helpers import handle_result, services

    bundle = handle_result(
        services.training.generate_untrained(
            _load_dataset(dataset), model_id=model_id, seed=seed, save=save
        )
    )
    suffix = "" if save else " (not saved)"
    print_success(
        f"Generated model {bundle.model_id}: {bundle.metadata.num_classes} classes, "
        f"{bundle.weights_size} weight bytes{suffix}"
    )


@train.command("progress")
@click.option("--training-id", default=None, help="Training id (accepted for compatibility)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def train_progress(training_id: str, as_json: bool) -> None:
    """Show a training progress snapshot.

    The snapshot is simulated and not linked to any running job.
    """
    import json

    from grocery_ml.cli.progress import console
    from grocery_ml.cli.service_helpers import handle_result, services

    progress = handle_result(services.training.get_progress(training_id))

    if as_json:
        click.echo(json.dumps(progress.to_dict(), indent=2))
        return

    console.print(
        f"Progress: {progress.progress}% "
        f"(epoch {progress.current_epoch}/{progress.total_epochs}, "
        f"~{progress.estimated_time_remaining / 1000:.1f}s remaining)"
    )
    console.print(f"Loss: {progress.metrics.loss:.4f}  Accuracy: {progress.metrics.accuracy:.4f}")
