from typing import List

import numpy as np
import torch
from loguru import logger
from torchmetrics.functional.classification import binary_auroc

from sentiment_bench.model.model import SentimentClassifier
from sentiment_bench.train.review_data import ReviewTokenizer


class SentimentPredictor:
    def __init__(
        self,
        classifier: SentimentClassifier,
        tokenizer: ReviewTokenizer,
        batch_size: int = 32,
    ) -> None:
        """Score review comments with a fine-tuned classifier

        Parameters
        ----------
        classifier : SentimentClassifier
            fine-tuned sentiment classifier
        tokenizer : ReviewTokenizer
            tokenizer of the classifier's model family
        batch_size : int, optional
            number of comments scored at once, by default 32
        """
        self.classifier = classifier
        self.tokenizer = tokenizer
        self.batch_size = batch_size

    def predict_proba(self, comments: List[str]) -> np.array:
        """Probability of positive sentiment for every comment"""
        self.classifier.eval()
        probabilities = []
        with torch.no_grad():
            for start in range(0, len(comments), self.batch_size):
                encoded = self.tokenizer.encode(comments[start : start + self.batch_size])
                encoded = {k: v.to(self.classifier.device) for k, v in encoded.items()}
                logits = self.classifier(encoded["input_ids"], encoded["attention_mask"])
                probabilities.append(torch.sigmoid(logits).cpu())

        if not probabilities:
            return np.empty(0, dtype=np.float32)
        return torch.cat(probabilities).numpy()


class Predictor:
    """
    Class to create baseline predictions and compute the AUC
    of sentiment classification
    """

    @staticmethod
    def get_majority_prediction(y_true: np.array) -> np.array:
        """Create baseline scores based on majority voting

        Parameters
        ----------
        y_true : np.array
            groundtruth binary labels

        Returns
        -------
        np.array
            the majority label as a constant score for every example
        """
        majority_label = np.argmax(np.bincount(y_true.astype(int), minlength=2))
        return np.full(y_true.shape, float(majority_label))

    @staticmethod
    def compute_auc(y_true: np.array, y_score: np.array, name: str = "model") -> float:
        """Compute the area under the ROC curve

        Parameters
        ----------
        y_true : np.array
            groundtruth binary labels
        y_score : np.array
            predicted probabilities of positive sentiment
        name : str, optional
            name of the predictions in the log, by default "model"
        """
        assert (
            y_true.shape == y_score.shape
        ), "Prediction and groundtruth labels do not share the same shape."

        auc = binary_auroc(
            torch.as_tensor(y_score, dtype=torch.float32),
            torch.as_tensor(y_true, dtype=torch.long),
        )
        logger.info(f"AUC for {name}: {round(float(auc), 4)}")
        return float(auc)
