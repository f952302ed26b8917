#!filepath: linreg/cli.py
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.markup import escape

from linreg import __version__
from linreg.config.app_config import AppConfig
from linreg.training.model_store import ModelStore
from linreg.utils.errors import LinRegError
from linreg.utils.logger import init_logging

app = typer.Typer(help="Linear regression training tool", no_args_is_help=True)


def _load_config(config: Optional[Path]) -> AppConfig:
    try:
        return AppConfig.load(str(config) if config is not None else None)
    except (FileNotFoundError, ValidationError) as e:
        print(f"[red]invalid config: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def train(
    filename: Path = typer.Option(
        ..., "-f", "--filename",
        help="Training data: a CSV file or a structured regression data file.",
    ),
    num_input_dimensions: Optional[int] = typer.Option(
        None, "-n", "--num-input-dimensions",
        help="Number of input columns, only required for CSV data.",
    ),
    num_target_dimensions: Optional[int] = typer.Option(
        None, "-t", "--num-target-dimensions",
        help="Number of target columns, only required for CSV data.",
    ),
    model: Optional[Path] = typer.Option(
        None, "--model",
        help="Where the trained model is saved (.json text or .joblib binary).",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config file."),
    max_epochs: Optional[int] = typer.Option(None, "--max-epochs"),
    learning_rate: Optional[float] = typer.Option(None, "--learning-rate"),
    min_change: Optional[float] = typer.Option(None, "--min-change"),
    patience: Optional[int] = typer.Option(None, "--patience"),
    validation_fraction: Optional[float] = typer.Option(None, "--validation-fraction"),
    seed: Optional[int] = typer.Option(None, "--seed"),
    scaling: Optional[bool] = typer.Option(None, "--scaling/--no-scaling"),
):
    """
    Train a linear regression model and save it.
    """
    from linreg.workflows.offline_training import run_offline_training

    cfg = _load_config(config)
    init_logging(cfg.log)

    if num_input_dimensions is not None:
        cfg.dataset.num_input_dimensions = num_input_dimensions
    if num_target_dimensions is not None:
        cfg.dataset.num_target_dimensions = num_target_dimensions

    overrides = {
        "max_epochs": max_epochs,
        "learning_rate": learning_rate,
        "min_change": min_change,
        "patience": patience,
        "validation_fraction": validation_fraction,
        "seed": seed,
        "enable_scaling": scaling,
    }
    cfg.training = cfg.training.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    print("[blue]Training regression model...[/blue]")
    try:
        ctx = run_offline_training(filename, cfg=cfg, model_path=model)
    except LinRegError as e:
        print(f"[red]Failed to train model: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    result = ctx.result
    print(f"[green]Model trained![/green] saved to {ctx.saved_path}")
    print(
        f"- epochs: {result.epochs} ({result.stop_reason.value})\n"
        f"- train rmse: {result.train_rmse:.6g}\n"
        f"- validation rmse: {result.validation_rmse}\n"
        f"- training time: {result.elapsed_seconds:.3f}s"
    )


# negative inputs such as -1.5 must not be parsed as options
@app.command(context_settings={"ignore_unknown_options": True})
def predict(
    values: List[float] = typer.Argument(..., help="One input vector (N values)."),
    model: Path = typer.Option(..., "--model", help="Saved model file."),
):
    """
    Predict the target vector for one input vector.
    """
    try:
        loaded = ModelStore.load(model)
        y = loaded.predict(values)
    except LinRegError as e:
        print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    print(" ".join(repr(float(v)) for v in y))


@app.command()
def info(model: Path = typer.Option(..., "--model", help="Saved model file.")):
    """
    Show the shape, scaling flag and stored training metrics of a model.
    """
    try:
        loaded = ModelStore.load(model)
        metadata = ModelStore.load_metadata(model)
    except LinRegError as e:
        print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    print(f"num input dimensions: {loaded.num_input_dimensions}")
    print(f"num target dimensions: {loaded.num_target_dimensions}")
    print(f"scaling enabled: {loaded.scaling_enabled}")
    for key, value in (metadata.get("metrics") or {}).items():
        print(f"{key}: {value}")


if __name__ == "__main__":
    app()

# python -m linreg.cli train -f data.csv -n 1 -t 1 --model model.json
