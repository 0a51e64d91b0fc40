from typing import List, Tuple

import numpy as np
import pandas as pd
from loguru import logger
from skmultilearn.model_selection import IterativeStratification


class ReviewDataRenderer:
    def __init__(self, data_dir: str, review_col: str, label_col: str) -> None:
        """Load sampled reviews and pair comments with sentiment labels

        Parameters
        ----------
        data_dir : str
            path of the processed review table
        review_col : str
            data column which provides the comment
        label_col : str
            data column which provides the binary sentiment label
        """
        self.data_dir = data_dir
        self.review_col = review_col
        self.label_col = label_col
        self.reviews_df = None

    def load_data(self) -> None:
        """Load processed review data in a dataframe"""
        self.reviews_df = pd.read_parquet(self.data_dir, engine="pyarrow")
        missing = {self.review_col, self.label_col} - set(self.reviews_df.columns)
        if missing:
            raise ValueError(f"Columns missing from {self.data_dir}: {sorted(missing)}")

        logger.info(f"Number of reviews loaded: {len(self.reviews_df)}")
        logger.info(f"Preview of dataset:\n{self.reviews_df.head(5)}")

    def check_num_words(self) -> None:
        """Generate descriptive statistics for the length of comments"""
        num_words = self.reviews_df[self.review_col].apply(
            lambda text: len(str(text).split())
        )
        logger.info(f"Length of comments:\n{num_words.describe()}")

    @staticmethod
    def render_data(X: np.array, y: np.array) -> List[Tuple]:
        """Generate pairs of labels & comments

        Parameters
        ----------
        X : np.array
            comments
        y : np.array
            binary sentiment labels

        Returns
        -------
        List[Tuple]
            Paired labels and comments
        """
        return [(int(label), str(comment)) for comment, label in zip(X, y)]

    def run(self) -> List[Tuple]:
        self.load_data()
        X = self.reviews_df[self.review_col].to_numpy()
        y = self.reviews_df[self.label_col].to_numpy()

        return self.render_data(X, y)


class ReviewDataSplitter(ReviewDataRenderer):
    def __init__(
        self,
        data_dir: str,
        review_col: str,
        label_col: str,
        train_size: float,
        seed: int = 42,
        stratify: bool = False,
    ) -> None:
        """Split reviews into training and validation data

        Parameters
        ----------
        data_dir : str
            path of the processed review table
        review_col : str
            data column which provides the comment
        label_col : str
            data column which provides the binary sentiment label
        train_size : float
            proportion of the training data
        seed : int, optional
            seed of the random split, by default 42
        stratify : bool, optional
            keep the label distribution equal across both splits,
            by default False
        """
        super().__init__(data_dir, review_col, label_col)
        if not 0.0 < train_size < 1.0:
            raise ValueError(f"train_size must lie in (0, 1), got {train_size}")
        self.train_size = train_size
        self.seed = seed
        self.stratify = stratify

    def random_train_test_split(self, num_examples: int) -> Tuple[np.array, np.array]:
        """Random index split of the examples"""
        rng = np.random.default_rng(self.seed)
        indices = rng.permutation(num_examples)
        num_train = int(round(self.train_size * num_examples))

        return np.sort(indices[:num_train]), np.sort(indices[num_train:])

    def iterative_train_test_split(
        self, X: np.array, y: np.array
    ) -> Tuple[np.array, np.array]:
        """Custom iterative train test split which maintains the
        distribution of labels in the training and test sets

        The stratifier breaks ties with the global numpy generator, which
        is seeded for the duration of the split and restored afterwards.
        """
        stratifier = IterativeStratification(
            n_splits=2,
            order=1,
            sample_distribution_per_fold=[
                1.0 - self.train_size,
                self.train_size,
            ],
        )
        global_state = np.random.get_state()
        np.random.seed(self.seed)
        try:
            train_indices, test_indices = next(stratifier.split(X, y.reshape(-1, 1)))
        finally:
            np.random.set_state(global_state)

        return np.sort(train_indices), np.sort(test_indices)

    def split_indices(self, X: np.array, y: np.array) -> Tuple[np.array, np.array]:
        if self.stratify:
            train_indices, valid_indices = self.iterative_train_test_split(X, y)
        else:
            train_indices, valid_indices = self.random_train_test_split(len(X))
        logger.info(f"Training indices: {train_indices[:10]}")
        logger.info(f"Validation indices: {valid_indices[:10]}")

        return train_indices, valid_indices

    def run(self) -> Tuple[List, List]:
        self.load_data()
        self.check_num_words()
        X = self.reviews_df[self.review_col].to_numpy()
        y = self.reviews_df[self.label_col].to_numpy()
        train_indices, valid_indices = self.split_indices(X, y)
        train_data = self.render_data(X[train_indices], y[train_indices])
        valid_data = self.render_data(X[valid_indices], y[valid_indices])
        logger.info(
            f"Volume of training data: {len(train_data)}, "
            f"validation data: {len(valid_data)}"
        )

        return train_data, valid_data
