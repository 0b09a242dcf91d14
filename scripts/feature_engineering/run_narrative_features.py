"""
Narrative Feature Extraction

Builds TF-IDF and topic features from an exported CSV of accident
narratives (one row per event):

1. Normalize narratives and build the pruned count matrix
2. Weight it with TF-IDF
3. Optionally sweep candidate topic counts by held-out perplexity
4. Fit the final Gibbs LDA model and write theta / top terms

Usage:
    python scripts/feature_engineering/run_narrative_features.py \\
        --input data/raw/narratives.csv --id-column ev_id --text-column narr_cause \\
        --num-topics 20 --sweep
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd
from scipy import sparse

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ntsb_text.config import settings, ensure_directories
from ntsb_text.features import NarrativeFeaturePipeline, PipelineConfig

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_narratives(input_path: Path, id_column: str, text_column: str) -> pd.Series:
    """
    Load narratives indexed by record id.

    Args:
        input_path: CSV file with one row per event
        id_column: Record identifier column
        text_column: Narrative column

    Returns:
        Series of narratives indexed by record id
    """
    df = pd.read_csv(input_path, usecols=[id_column, text_column], dtype={id_column: str})
    df = df.drop_duplicates(subset=id_column, keep="first")
    logger.info(f"Loaded {len(df)} narratives from {input_path}")
    return df.set_index(id_column)[text_column]


def main():
    parser = argparse.ArgumentParser(
        description="Build TF-IDF and topic features from accident narratives"
    )
    parser.add_argument('--input', type=str, required=True, help='CSV of narratives')
    parser.add_argument('--id-column', type=str, default='ev_id', help='Record id column')
    parser.add_argument('--text-column', type=str, default='narr_cause', help='Narrative column')
    parser.add_argument(
        '--output-dir',
        type=str,
        default=str(settings.paths.processed_data_dir),
        help='Output directory for features'
    )
    parser.add_argument('--num-topics', type=int, default=None, help='Number of LDA topics')
    parser.add_argument('--iterations', type=int, default=None, help='Gibbs sweeps')
    parser.add_argument('--seed', type=int, default=None, help='Sampler seed')
    parser.add_argument(
        '--sweep',
        action='store_true',
        help='Score candidate K values (settings.topic_modeling.evaluation.k_values) by held-out perplexity'
    )
    args = parser.parse_args()

    ensure_directories()
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    narratives = load_narratives(Path(args.input), args.id_column, args.text_column)

    config = PipelineConfig(
        num_topics=args.num_topics,
        iterations=args.iterations,
        random_state=args.seed,
    )
    pipeline = NarrativeFeaturePipeline(config)
    features = pipeline.build_features(narratives)

    sparse.save_npz(output_dir / "tfidf.npz", features.tfidf.matrix)
    pd.Series(features.tfidf.doc_ids, name="record_id").to_csv(output_dir / "tfidf_rows.csv", index=False)
    pd.Series(features.tfidf.vocabulary, name="term").to_csv(output_dir / "tfidf_terms.csv", index=False)
    pd.Series(features.dropped_ids, name="record_id").to_csv(output_dir / "dropped_records.csv", index=False)

    if args.sweep:
        sweep = pipeline.sweep_topics(features)
        sweep.as_series().to_csv(output_dir / "perplexity_by_k.csv")
        print(sweep.as_series().to_string())

    fit = pipeline.fit_topics(features)
    num_words = settings.topic_modeling.output.num_top_terms
    precision = settings.topic_modeling.output.precision

    fit.theta_frame().round(precision).to_csv(output_dir / "theta.csv")
    fit.top_terms_table(num_words).to_csv(output_dir / "topic_top_terms.csv", index=False)

    print(f"\nDiscovered Topics (n={fit.num_topics}):")
    print("=" * 80)
    for topic in fit.topic_terms(num_words):
        print(topic.label(num_words))
    print("=" * 80)
    print(f"Outputs written to {output_dir}")


if __name__ == "__main__":
    main()
