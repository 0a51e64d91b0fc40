from typing import Dict, List

import pytorch_lightning as pl
import torch
import torch.nn.functional as F
from loguru import logger
from torchmetrics import MeanMetric
from torchmetrics.classification import BinaryAUROC
from transformers import PreTrainedModel

from sentiment_bench.model.pooling import MeanPooling


class SentimentClassifier(pl.LightningModule):
    def __init__(self, model, learning_rate: float):
        """Binary sentiment classifier trained with the Lightning fit loop

        Parameters
        ----------
        model : TransformerClassificationModel
            transformer backbone with a classification head
        learning_rate : float
            learning rate of the Adam optimizer
        """
        super().__init__()
        self.model = model
        self.learning_rate = learning_rate
        self.train_loss = MeanMetric()
        self.val_loss = MeanMetric()
        self.train_auc = BinaryAUROC()
        self.val_auc = BinaryAUROC()

        # Epoch level metrics as {"epoch", "metric", "value"} records
        self.history: List[Dict] = []

    def forward(self, input_ids, attention_mask):
        return self.model(input_ids, attention_mask)

    def _calculate_loss(self, batch, mode="train"):
        y = batch["labels"]
        y_hat = self(batch["input_ids"], batch["attention_mask"])
        loss = F.binary_cross_entropy_with_logits(y_hat, y.float(), reduction="mean")

        # Accumulate for the epoch level loss and AUC
        loss_metric = self.train_loss if mode == "train" else self.val_loss
        auc_metric = self.train_auc if mode == "train" else self.val_auc
        loss_metric.update(loss.detach(), weight=len(y))
        auc_metric.update(torch.sigmoid(y_hat.detach()), y.int())

        self.log(f"{mode}_step_loss", loss, prog_bar=True, batch_size=len(y))
        return loss

    def _record_epoch(self, mode: str) -> None:
        loss_metric = self.train_loss if mode == "train" else self.val_loss
        auc_metric = self.train_auc if mode == "train" else self.val_auc
        scores = {
            f"{mode}_loss": loss_metric.compute(),
            f"{mode}_auc": auc_metric.compute(),
        }
        loss_metric.reset()
        auc_metric.reset()

        self.log_dict(scores, prog_bar=True)
        for metric, value in scores.items():
            self.history.append(
                {
                    "epoch": self.current_epoch + 1,
                    "metric": metric,
                    "value": float(value),
                }
            )
        logger.info(
            f"Epoch {self.current_epoch + 1}: "
            + ", ".join(f"{k}={float(v):.4f}" for k, v in scores.items())
        )

    def training_step(self, batch, batch_idx):
        loss = self._calculate_loss(batch, "train")
        return loss

    def validation_step(self, batch, batch_nb):
        loss = self._calculate_loss(batch, "val")
        return loss

    def on_train_epoch_end(self):
        self._record_epoch("train")

    def on_validation_epoch_end(self):
        # The sanity check runs before the first epoch and is not a result
        if self.trainer.sanity_checking:
            self.val_loss.reset()
            self.val_auc.reset()
            return
        self._record_epoch("val")

    def predict_step(self, batch, batch_idx):
        y_hat = self(batch["input_ids"], batch["attention_mask"])
        return {
            "logits": y_hat,
            "probabilities": torch.sigmoid(y_hat),
            "labels": batch["labels"],
            "comments": batch["comment"],
        }

    def configure_optimizers(self):
        params = [p for p in self.parameters() if p.requires_grad]
        optimizer = torch.optim.Adam(params, lr=self.learning_rate)
        return optimizer


class TransformerClassificationModel(torch.nn.Module):
    def __init__(self, backbone: PreTrainedModel, dropout: float = 0.1):
        """One layer classification head on top of a pretrained transformer

        Parameters
        ----------
        backbone : PreTrainedModel
            pretrained transformer which returns the last hidden state
        dropout : float, optional
            dropout applied to the pooled embedding, by default 0.1
        """
        super().__init__()
        self.backbone = backbone
        self.pooling = MeanPooling()
        self.head = torch.nn.Sequential(
            torch.nn.Dropout(dropout),
            torch.nn.Linear(backbone.config.hidden_size, 1),
        )

    def freeze_backbone(self) -> None:
        """Train the classification head only"""
        for param in self.backbone.parameters():
            param.requires_grad = False

    def forward(self, input_ids, attention_mask):
        """Projection from token ids to one logit per example
        Batch in is shape (batch_size, max_seq_len)

        Batch out is shape (batch_size,)
        """
        output = self.backbone(input_ids=input_ids, attention_mask=attention_mask)
        pooled = self.pooling(output.last_hidden_state, attention_mask)
        return self.head(pooled).squeeze(-1)
