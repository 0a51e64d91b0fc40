from enum import Enum
from typing import Dict, Optional, Tuple, Type, Union

from loguru import logger
from transformers import (
    ElectraModel,
    ElectraTokenizerFast,
    GPT2Model,
    GPT2TokenizerFast,
    PreTrainedModel,
    PreTrainedTokenizerBase,
    RobertaModel,
    RobertaTokenizerFast,
)


class ModelKind(str, Enum):
    """Pretrained transformer families supported by the benchmark"""

    GPT2 = "gpt2"
    ROBERTA = "roberta"
    ELECTRA = "electra"

    @classmethod
    def parse(cls, value: Union[str, "ModelKind"]) -> "ModelKind":
        """Resolve a model kind from its name

        Parameters
        ----------
        value : Union[str, ModelKind]
            model kind or its case-insensitive name

        Returns
        -------
        ModelKind
            the matching model kind

        Raises
        ------
        ValueError
            if the name does not match any supported kind
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            supported = ", ".join(kind.value for kind in cls)
            raise ValueError(
                f"Unknown model kind '{value}'. Supported: {supported}"
            ) from None


# Backbone and tokenizer classes per model kind
BACKBONES: Dict[ModelKind, Tuple[Type[PreTrainedModel], Type]] = {
    ModelKind.GPT2: (GPT2Model, GPT2TokenizerFast),
    ModelKind.ROBERTA: (RobertaModel, RobertaTokenizerFast),
    ModelKind.ELECTRA: (ElectraModel, ElectraTokenizerFast),
}

DEFAULT_CHECKPOINTS: Dict[ModelKind, str] = {
    ModelKind.GPT2: "gpt2",
    ModelKind.ROBERTA: "roberta-base",
    ModelKind.ELECTRA: "google/electra-small-discriminator",
}


def load_tokenizer(
    kind: Union[str, ModelKind], checkpoint: Optional[str] = None
) -> PreTrainedTokenizerBase:
    """Fetch the pretrained tokenizer of a model family

    Parameters
    ----------
    kind : Union[str, ModelKind]
        model family of the tokenizer
    checkpoint : Optional[str], optional
        pretrained model identifier, by default the family's default checkpoint

    Returns
    -------
    PreTrainedTokenizerBase
        tokenizer loaded from the checkpoint
    """
    kind = ModelKind.parse(kind)
    checkpoint = checkpoint or DEFAULT_CHECKPOINTS[kind]
    _, tokenizer_cls = BACKBONES[kind]
    logger.info(f"Loading {tokenizer_cls.__name__} from {checkpoint} ...")

    return tokenizer_cls.from_pretrained(checkpoint)


def load_backbone(
    kind: Union[str, ModelKind], checkpoint: Optional[str] = None
) -> PreTrainedModel:
    """Fetch a pretrained transformer which returns its last hidden state

    Parameters
    ----------
    kind : Union[str, ModelKind]
        model family of the backbone
    checkpoint : Optional[str], optional
        pretrained model identifier, by default the family's default checkpoint

    Returns
    -------
    PreTrainedModel
        backbone without a task specific head
    """
    kind = ModelKind.parse(kind)
    checkpoint = checkpoint or DEFAULT_CHECKPOINTS[kind]
    model_cls, _ = BACKBONES[kind]
    logger.info(f"Loading {model_cls.__name__} from {checkpoint} ...")

    return model_cls.from_pretrained(checkpoint)
