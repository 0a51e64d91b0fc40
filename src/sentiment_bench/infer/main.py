from pathlib import Path
from typing import Dict, List, Tuple

import hydra
import numpy as np
import pandas as pd
import torch
from loguru import logger
from omegaconf import DictConfig

from sentiment_bench.infer.predictor import Predictor, SentimentPredictor
from sentiment_bench.model.backbones import ModelKind, load_backbone
from sentiment_bench.model.model import (
    SentimentClassifier,
    TransformerClassificationModel,
)
from sentiment_bench.train.review_data import ReviewTokenizer
from sentiment_bench.train.splitter import ReviewDataSplitter


@hydra.main(version_base=None, config_path="../config", config_name="config")
def main(cfg: DictConfig) -> None:
    scores = score_models(cfg)
    logger.info(f"\n{scores}")


def score_models(cfg: DictConfig) -> pd.DataFrame:
    """Score every fine-tuned backbone on the validation split"""
    reviews_splitter = ReviewDataSplitter(
        data_dir=cfg.datasets.reviews.processed,
        review_col=cfg.features.review_col,
        label_col=cfg.features.label_col,
        train_size=cfg.features.train_size,
        seed=cfg.seed,
        stratify=cfg.features.stratify,
    )

    # Score the same validation split the models were trained against
    _, valid_data = reviews_splitter.run()
    logger.info(f"Volume of validation data: {len(valid_data)}")
    logger.info(f"Preview of validation data:\n{valid_data[:3]}")

    scores = []
    for backbone_cfg in cfg.model.backbones:
        classifier = load_classifier(backbone_cfg, cfg)
        tokenizer = ReviewTokenizer.from_pretrained(
            backbone_cfg.kind, backbone_cfg.get("checkpoint"), cfg.features.max_seq_len
        )
        predictor = SentimentPredictor(
            classifier, tokenizer, batch_size=cfg.model.batch_size
        )
        scores.append(score_validation(backbone_cfg.name, predictor, valid_data))

    return pd.DataFrame(scores)


def load_classifier(backbone_cfg: DictConfig, cfg: DictConfig) -> SentimentClassifier:
    """Rebuild a classifier and load the weights saved by training"""
    kind = ModelKind.parse(backbone_cfg.kind)
    classifier = SentimentClassifier(
        TransformerClassificationModel(
            load_backbone(kind, backbone_cfg.get("checkpoint")),
            dropout=cfg.model.dropout,
        ),
        learning_rate=cfg.model.learning_rate,
    )
    model_file = Path(cfg.model_dir) / f"{backbone_cfg.name}.pt"
    classifier.load_state_dict(torch.load(model_file, map_location="cpu"))
    logger.info(f"Sentiment model loaded from {model_file}.")

    return classifier.eval()


def score_validation(
    name: str, predictor: SentimentPredictor, valid_data: List[Tuple]
) -> Dict:
    """Compare the validation AUC of a model with the majority baseline"""
    y_true = np.array([label for label, _ in valid_data])
    comments = [comment for _, comment in valid_data]

    y_majority = Predictor.get_majority_prediction(y_true)
    baseline_auc = Predictor.compute_auc(y_true, y_majority, name="majority")

    y_score = predictor.predict_proba(comments)
    model_auc = Predictor.compute_auc(y_true, y_score, name=name)

    return {"model": name, "val_auc": model_auc, "majority_auc": baseline_auc}


if __name__ == "__main__":
    main()
