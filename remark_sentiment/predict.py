"""
Command-line sentiment prediction.

Usage:
    python -m remark_sentiment.predict --text "I love it, truly."
    python -m remark_sentiment.predict --input_path data.csv --output_path preds.csv
"""

import argparse
import logging
from pathlib import Path

import pandas as pd
from tqdm import tqdm

from remark_sentiment.errors import EmptyInputError, SentimentError
from remark_sentiment.inference import ClassificationResult, SentimentClassifier
from remark_sentiment.utils import load_config, setup_logging

logger = logging.getLogger("remark_sentiment")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sentiment prediction for short messages")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", type=str, help="Single message to classify")
    source.add_argument("--input_path", type=str, help="Input CSV with a text column")
    parser.add_argument("--output_path", type=str, default="predictions.csv", help="Output CSV path")
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")
    parser.add_argument("--text_column", type=str, default="text", help="Text column name")
    parser.add_argument("--log_level", type=str, default=None, help="Logging level, overrides the config")
    return parser.parse_args(argv)


def format_message(result: ClassificationResult) -> str:
    """Render a result as the user-facing sentence."""
    return (
        f"That is a {result.label} remark! "
        f"With a sentiment score of {result.percentage:.2f}%."
    )


def predict_frame(
    classifier: SentimentClassifier,
    df: pd.DataFrame,
    text_column: str = "text",
) -> pd.DataFrame:
    """
    Classify every row of a DataFrame.
    
    Blank or missing texts are labelled 'unknown' with a NaN score.
    
    Returns:
        Copy of df with 'prediction' and 'score' columns appended
    """
    predictions = []
    scores = []
    for text in tqdm(df[text_column].tolist(), desc="Predicting"):
        if pd.isna(text) or not str(text).strip():
            predictions.append("unknown")
            scores.append(float("nan"))
            continue
        result = classifier.classify(str(text))
        predictions.append(result.label)
        scores.append(result.score)
    
    output_df = df.reset_index(drop=True).copy()
    output_df["prediction"] = predictions
    output_df["score"] = scores
    return output_df


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config) if args.config else {}
    log_config = config.get("logging", {})
    setup_logging(args.log_level or log_config.get("level", "INFO"), log_config.get("file"))
    
    classifier = SentimentClassifier.from_config(config)
    
    if args.text is not None:
        try:
            result = classifier.classify(args.text)
        except EmptyInputError as exc:
            print(exc)
            return 1
        except SentimentError as exc:
            logger.error(f"Classification failed: {exc}")
            return 2
        print(format_message(result))
        return 0
    
    logger.info(f"Loading data from {args.input_path}")
    df = pd.read_csv(args.input_path)
    if args.text_column not in df.columns:
        logger.error(f"Column '{args.text_column}' not found in {args.input_path}")
        return 1
    
    logger.info(f"Predicting {len(df)} samples...")
    try:
        output_df = predict_frame(classifier, df, args.text_column)
    except SentimentError as exc:
        logger.error(f"Classification failed: {exc}")
        return 2
    
    Path(args.output_path).parent.mkdir(parents=True, exist_ok=True)
    output_df.to_csv(args.output_path, index=False)
    
    counts = output_df["prediction"].value_counts().to_dict()
    logger.info(f"Done! {', '.join(f'{k}: {v}' for k, v in sorted(counts.items()))}")
    logger.info(f"Saved to {args.output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
