from typing import Dict, List, Tuple, Union

import pytorch_lightning as pl
import torch
from torch.utils.data import DataLoader, Dataset
from transformers import PreTrainedTokenizerBase

from sentiment_bench.model.backbones import ModelKind, load_tokenizer


class ReviewTokenizer:
    def __init__(self, tokenizer: PreTrainedTokenizerBase, max_seq_len: int):
        """Convert review comments to fixed length token id sequences

        Parameters
        ----------
        tokenizer : PreTrainedTokenizerBase
            tokenizer of the pretrained model family
        max_seq_len : int
            number of tokens every comment is padded or truncated to
        """
        # GPT-2 ships without a padding token
        if tokenizer.pad_token is None:
            tokenizer.pad_token = tokenizer.eos_token
        self.tokenizer = tokenizer
        self.max_seq_len = max_seq_len

    @classmethod
    def from_pretrained(
        cls, kind: Union[str, ModelKind], checkpoint: str, max_seq_len: int
    ) -> "ReviewTokenizer":
        return cls(load_tokenizer(kind, checkpoint), max_seq_len)

    def encode(self, comments: List[str]) -> Dict[str, torch.Tensor]:
        """Tokenize comments into a rectangular table of token ids

        Returns
        -------
        Dict[str, torch.Tensor]
            input_ids and attention_mask, each of shape (n, max_seq_len)
        """
        encoded = self.tokenizer(
            [str(comment) for comment in comments],
            padding="max_length",
            truncation=True,
            max_length=self.max_seq_len,
            return_tensors="pt",
        )
        return {
            "input_ids": encoded["input_ids"],
            "attention_mask": encoded["attention_mask"],
        }


class ReviewDataset(Dataset):
    """Pytorch dataset holding a tokenized split of the reviews

    Every comment is tokenized once when the dataset is created.
    """

    def __init__(self, data: List[Tuple], tokenizer: ReviewTokenizer):
        self.comments = [comment for _, comment in data]
        self.labels = torch.LongTensor([int(label) for label, _ in data])
        encoded = tokenizer.encode(self.comments)
        self.input_ids = encoded["input_ids"]
        self.attention_mask = encoded["attention_mask"]

    def __len__(self):
        return len(self.comments)

    def __getitem__(self, idx):
        return {
            "input_ids": self.input_ids[idx],
            "attention_mask": self.attention_mask[idx],
            "labels": self.labels[idx],
            "comment": self.comments[idx],
        }


class ReviewDataModule(pl.LightningDataModule):
    """LightningDataModule: Wrapper class for the dataset to be used in training"""

    def __init__(
        self,
        tokenizer: ReviewTokenizer,
        batch_size: int,
        train_data: List[Tuple],
        valid_data: List[Tuple],
    ):
        super().__init__()
        self.batch_size = batch_size
        self.reviews_train = ReviewDataset(train_data, tokenizer)
        self.reviews_valid = ReviewDataset(valid_data, tokenizer)

    def train_dataloader(self):
        return DataLoader(
            self.reviews_train,
            batch_size=self.batch_size,
            shuffle=True,
        )

    def val_dataloader(self):
        return DataLoader(
            self.reviews_valid,
            batch_size=self.batch_size,
        )

    def predict_dataloader(self):
        return self.val_dataloader()
