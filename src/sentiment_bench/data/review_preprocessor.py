import re
from typing import Dict

import cleantext
import pandas as pd
from loguru import logger

LINE_BREAK_RE = re.compile(r"<br\s*/?>", flags=re.IGNORECASE)


class ReviewPreprocessor:
    """Helper class to load, label and sample review comments"""

    @staticmethod
    def load_reviews(
        data_dir: str, text_col: str, sentiment_col: str
    ) -> pd.DataFrame:
        """Read raw reviews from a .csv file or URL

        Parameters
        ----------
        data_dir : str
            path or URL of the raw review corpus
        text_col : str
            column which holds the review text
        sentiment_col : str
            column which holds the sentiment annotation

        Returns
        -------
        pd.DataFrame
            reviews with the columns comment and sentiment
        """
        raw_df = pd.read_csv(data_dir)
        missing = {text_col, sentiment_col} - set(raw_df.columns)
        if missing:
            raise ValueError(f"Columns missing from {data_dir}: {sorted(missing)}")

        reviews_df = raw_df[[text_col, sentiment_col]].rename(
            columns={text_col: "comment", sentiment_col: "sentiment"}
        )
        reviews_df = reviews_df.dropna().drop_duplicates(subset=["comment"])
        logger.info(f"There are {len(reviews_df)} reviews in {data_dir}.")

        return reviews_df.reset_index(drop=True)

    @staticmethod
    def normalise_sentiment(sentiment) -> str:
        """Lowercase annotation with numeric values such as "1.0" reduced to "1" """
        sentiment = str(sentiment).strip().lower()
        try:
            number = float(sentiment)
        except ValueError:
            return sentiment
        return str(int(number)) if number.is_integer() else sentiment

    @staticmethod
    def encode_labels(
        reviews_df: pd.DataFrame, label_encoder: Dict[str, int]
    ) -> pd.DataFrame:
        """Map sentiment annotations to binary labels, dropping
        reviews whose annotation is not recognised

        Parameters
        ----------
        reviews_df : pd.DataFrame
            reviews with a sentiment column
        label_encoder : Dict[str, int]
            mapping between sentiment annotation and integer labels
        """
        label_encoder = {
            ReviewPreprocessor.normalise_sentiment(k): int(v)
            for k, v in label_encoder.items()
        }
        labels = reviews_df["sentiment"].map(
            lambda x: label_encoder.get(ReviewPreprocessor.normalise_sentiment(x))
        )
        num_unknown = int(labels.isna().sum())
        if num_unknown:
            logger.warning(f"Dropping {num_unknown} reviews with unknown sentiment.")

        reviews_df = reviews_df.assign(label=labels).dropna(subset=["label"])
        reviews_df["label"] = reviews_df["label"].astype(int)

        return reviews_df.reset_index(drop=True)

    @staticmethod
    def clean_comments(reviews_df: pd.DataFrame, clean: bool = True) -> pd.DataFrame:
        """Strip HTML line breaks and optionally normalise whitespace,
        then remove comments which end up blank
        """
        comments = reviews_df["comment"].astype(str).str.replace(
            LINE_BREAK_RE, " ", regex=True
        )
        if clean:
            comments = comments.apply(cleantext.clean, clean_all=False, extra_spaces=True)

        reviews_df = reviews_df.assign(comment=comments)
        reviews_df = reviews_df[reviews_df["comment"].str.strip().str.len() > 0]
        logger.info(f"{len(reviews_df)} reviews remain after text cleaning.")

        return reviews_df.reset_index(drop=True)

    @staticmethod
    def sample_reviews(
        reviews_df: pd.DataFrame, sample_size: int, seed: int = 42
    ) -> pd.DataFrame:
        """Draw a random sample of reviews; the whole corpus is kept
        when it is smaller than the sample size
        """
        if sample_size is None or sample_size >= len(reviews_df):
            return reviews_df.reset_index(drop=True)

        return reviews_df.sample(n=sample_size, random_state=seed).reset_index(
            drop=True
        )

    @staticmethod
    def count_labels(reviews_df: pd.DataFrame) -> pd.Series:
        """Check the distribution of sentiment labels"""
        return reviews_df["label"].value_counts().sort_index()
