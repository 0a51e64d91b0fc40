import pandas as pd
import pytest
from hydra import compose, initialize
from omegaconf import OmegaConf

from sentiment_bench.data.main import prepare_reviews
from sentiment_bench.data.review_preprocessor import ReviewPreprocessor

LABEL_ENCODER = {"positive": 1, "pos": 1, "1": 1, "negative": 0, "neg": 0, "0": 0}


@pytest.fixture
def raw_csv(tmp_path):
    raw_df = pd.DataFrame(
        {
            "review": [
                "Loved it.<br /><br />Great cast",
                "Terrible plot",
                "Terrible plot",
                "<br />",
                "Fine I guess",
                "Best film this year",
            ],
            "sentiment": ["positive", "negative", "negative", "positive", "meh", "POS"],
        }
    )
    path = tmp_path / "raw.csv"
    raw_df.to_csv(path, index=False)
    return str(path)


def test_load_reviews_renames_and_deduplicates(raw_csv):
    reviews_df = ReviewPreprocessor.load_reviews(raw_csv, "review", "sentiment")

    assert list(reviews_df.columns) == ["comment", "sentiment"]
    assert len(reviews_df) == 5


def test_load_reviews_rejects_missing_columns(raw_csv):
    with pytest.raises(ValueError, match="text"):
        ReviewPreprocessor.load_reviews(raw_csv, "text", "sentiment")


def test_encode_labels_drops_unknown_sentiment(raw_csv):
    reviews_df = ReviewPreprocessor.load_reviews(raw_csv, "review", "sentiment")

    reviews_df = ReviewPreprocessor.encode_labels(reviews_df, LABEL_ENCODER)

    assert len(reviews_df) == 4
    assert reviews_df["label"].tolist() == [1, 0, 1, 1]


def test_encode_labels_accepts_numeric_annotations():
    reviews_df = pd.DataFrame(
        {"comment": ["a", "b", "c", "d", "e"], "sentiment": [1.0, "0.0", 0, " 1 ", 0.5]}
    )

    reviews_df = ReviewPreprocessor.encode_labels(reviews_df, LABEL_ENCODER)

    assert reviews_df["comment"].tolist() == ["a", "b", "c", "d"]
    assert reviews_df["label"].tolist() == [1, 0, 0, 1]


def test_label_encoder_comes_from_config():
    with initialize(version_base=None, config_path="../src/sentiment_bench/config"):
        cfg = compose(config_name="config", overrides=["+features.label_encoder.great=1"])
    reviews_df = pd.DataFrame({"comment": ["a", "b"], "sentiment": ["Great", "negative"]})

    reviews_df = ReviewPreprocessor.encode_labels(
        reviews_df, OmegaConf.to_container(cfg.features.label_encoder)
    )

    assert reviews_df["label"].tolist() == [1, 0]


def test_clean_comments_strips_line_breaks_and_blanks():
    reviews_df = pd.DataFrame({"comment": ["Loved it.<br />Great", "<br/>  "], "label": [1, 0]})

    cleaned = ReviewPreprocessor.clean_comments(reviews_df, clean=False)

    assert cleaned["comment"].tolist() == ["Loved it. Great"]


def test_sample_reviews_is_seeded():
    reviews_df = pd.DataFrame({"comment": [str(i) for i in range(50)], "label": [i % 2 for i in range(50)]})

    first = ReviewPreprocessor.sample_reviews(reviews_df, 10, seed=1)
    second = ReviewPreprocessor.sample_reviews(reviews_df, 10, seed=1)

    assert len(first) == 10
    pd.testing.assert_frame_equal(first, second)
    assert len(ReviewPreprocessor.sample_reviews(reviews_df, 500)) == 50


def test_prepare_reviews_writes_parquet(raw_csv, tmp_path):
    with initialize(version_base=None, config_path="../src/sentiment_bench/config"):
        cfg = compose(config_name="config")
    cfg.datasets.reviews.raw = raw_csv
    cfg.datasets.reviews.processed = str(tmp_path / "processed" / "reviews.parquet")
    cfg.datasets.reviews.clean = False

    output = prepare_reviews(cfg)

    reviews_df = pd.read_parquet(output)
    assert list(reviews_df.columns) == ["comment", "label"]
    assert len(reviews_df) == 3
    assert set(reviews_df["label"]) == {0, 1}
