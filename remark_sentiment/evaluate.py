"""
Evaluate the pretrained classifier against a labelled CSV.

Usage:
    python -m remark_sentiment.evaluate --input_path labelled.csv --output metrics.json
"""

import argparse
import json
import logging

import pandas as pd
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix, f1_score

from remark_sentiment.inference import SENTIMENT_LABELS, SentimentClassifier
from remark_sentiment.predict import predict_frame
from remark_sentiment.utils import load_config, setup_logging

logger = logging.getLogger("remark_sentiment")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate sentiment classifier")
    parser.add_argument("--input_path", type=str, required=True, help="CSV with text and label columns")
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")
    parser.add_argument("--text_column", type=str, default="text")
    parser.add_argument("--label_column", type=str, default="label")
    parser.add_argument("--output", type=str, default="metrics.json", help="Output metrics file")
    return parser.parse_args(argv)


def compute_metrics(labels: list[str], predictions: list[str]) -> dict:
    """Compute classification metrics over the three sentiment labels."""
    return {
        "accuracy": float(accuracy_score(labels, predictions)),
        "f1_score": float(
            f1_score(labels, predictions, labels=list(SENTIMENT_LABELS), average="weighted", zero_division=0)
        ),
        "confusion_matrix": confusion_matrix(labels, predictions, labels=list(SENTIMENT_LABELS)).tolist(),
        "report": classification_report(
            labels, predictions, labels=list(SENTIMENT_LABELS), output_dict=True, zero_division=0
        ),
        "num_samples": len(labels),
    }


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config) if args.config else {}
    log_config = config.get("logging", {})
    setup_logging(log_config.get("level", "INFO"), log_config.get("file"))
    
    df = pd.read_csv(args.input_path)
    df = df.dropna(subset=[args.text_column, args.label_column])
    df = df[df[args.label_column].isin(SENTIMENT_LABELS)]
    logger.info(f"Evaluating on {len(df)} labelled samples")
    
    classifier = SentimentClassifier.from_config(config)
    output_df = predict_frame(classifier, df, args.text_column)
    
    known = output_df["prediction"] != "unknown"
    metrics = compute_metrics(
        output_df.loc[known, args.label_column].tolist(),
        output_df.loc[known, "prediction"].tolist(),
    )
    
    print(f"Accuracy: {metrics['accuracy']:.4f}, F1: {metrics['f1_score']:.4f}")
    
    with open(args.output, "w") as f:
        json.dump(metrics, f, indent=2)
    logger.info(f"Metrics saved to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
