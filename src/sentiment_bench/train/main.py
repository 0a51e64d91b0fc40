from pathlib import Path
from typing import Dict, List, Tuple

import hydra
import pandas as pd
import pytorch_lightning as pl
import torch
from loguru import logger
from omegaconf import DictConfig, OmegaConf

from sentiment_bench.model.backbones import ModelKind, load_backbone
from sentiment_bench.model.model import (
    SentimentClassifier,
    TransformerClassificationModel,
)
from sentiment_bench.train.results import (
    combine_results,
    final_scores,
    history_to_frame,
    pivot_results,
    save_results,
)
from sentiment_bench.train.review_data import ReviewDataModule, ReviewTokenizer
from sentiment_bench.train.splitter import ReviewDataSplitter


@hydra.main(version_base=None, config_path="../config", config_name="config")
def main(cfg: DictConfig) -> None:
    logger.debug(OmegaConf.to_container(cfg))
    run_benchmark(cfg)


def run_benchmark(cfg: DictConfig) -> pd.DataFrame:
    """Fine-tune every configured backbone and tabulate the epoch metrics"""
    reviews_splitter = ReviewDataSplitter(
        data_dir=cfg.datasets.reviews.processed,
        review_col=cfg.features.review_col,
        label_col=cfg.features.label_col,
        train_size=cfg.features.train_size,
        seed=cfg.seed,
        stratify=cfg.features.stratify,
    )

    frames = []
    for backbone_cfg in cfg.model.backbones:
        frames.append(run_backbone(backbone_cfg, reviews_splitter, cfg))

    results = combine_results(frames)
    logger.info(f"Metrics by model and epoch:\n{pivot_results(results)}")
    logger.info(f"Validation AUC after the last epoch:\n{final_scores(results)}")
    save_results(results, cfg.results_file)

    return results


def run_backbone(
    backbone_cfg: DictConfig, reviews_splitter: ReviewDataSplitter, cfg: DictConfig
) -> pd.DataFrame:
    name = backbone_cfg.name
    kind = ModelKind.parse(backbone_cfg.kind)
    checkpoint = backbone_cfg.get("checkpoint")
    logger.info(f"==================== {name} ({kind.value}) ====================")

    pl.seed_everything(cfg.seed)
    train_data, valid_data = reviews_splitter.run()

    tokenizer = ReviewTokenizer.from_pretrained(
        kind, checkpoint, cfg.features.max_seq_len
    )
    model = TransformerClassificationModel(
        load_backbone(kind, checkpoint), dropout=cfg.model.dropout
    )
    if cfg.model.freeze_backbone:
        model.freeze_backbone()

    history = trainer(
        model=model,
        tokenizer=tokenizer,
        hyparams=cfg.model,
        train_data=train_data,
        valid_data=valid_data,
        model_file=str(Path(cfg.model_dir) / f"{name}.pt"),
    )
    return history_to_frame(name, history)


def trainer(
    model: TransformerClassificationModel,
    tokenizer: ReviewTokenizer,
    hyparams: DictConfig,
    train_data: List[Tuple],
    valid_data: List[Tuple],
    model_file: str = None,
) -> List[Dict]:
    # Create a pytorch trainer
    trainer = pl.Trainer(
        max_epochs=hyparams.max_epochs,
        accelerator=hyparams.accelerator,
        check_val_every_n_epoch=1,
        logger=False,
        enable_checkpointing=False,
    )

    # Tokenize both splits into fixed length tables
    data_module = ReviewDataModule(
        tokenizer=tokenizer,
        batch_size=hyparams.batch_size,
        train_data=train_data,
        valid_data=valid_data,
    )

    # Instantiate a new classifier
    classifier = SentimentClassifier(model, learning_rate=hyparams.learning_rate)

    # Train and validate the model
    trainer.fit(
        classifier,
        data_module.train_dataloader(),
        val_dataloaders=data_module.val_dataloader(),
    )

    # Export fitted model
    if model_file is not None:
        Path(model_file).parent.mkdir(parents=True, exist_ok=True)
        torch.save(classifier.state_dict(), model_file)
        logger.info(f"Sentiment model exported to {model_file}.")

    return classifier.history


if __name__ == "__main__":
    main()
