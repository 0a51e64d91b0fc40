import pandas as pd
import pytest
from tokenizers import Tokenizer
from tokenizers.models import WordLevel
from tokenizers.pre_tokenizers import Whitespace
from transformers import (
    ElectraConfig,
    ElectraModel,
    GPT2Config,
    GPT2Model,
    PreTrainedTokenizerFast,
    RobertaConfig,
    RobertaModel,
)

from sentiment_bench.model.backbones import ModelKind
from sentiment_bench.train.review_data import ReviewTokenizer

WORDS = "the a it was movie plot acting great loved fun awful hated boring dull".split()
VOCAB_SIZE = 32
MAX_SEQ_LEN = 8

POSITIVE = ["the movie was great", "loved the acting", "a fun plot", "great fun"]
NEGATIVE = ["the movie was awful", "hated the acting", "a boring plot", "dull dull"]


def make_hf_tokenizer() -> PreTrainedTokenizerFast:
    """Word level tokenizer without a padding token, like GPT-2"""
    vocab = {"[UNK]": 0, "[EOS]": 1}
    for word in WORDS:
        vocab[word] = len(vocab)
    tokenizer = Tokenizer(WordLevel(vocab=vocab, unk_token="[UNK]"))
    tokenizer.pre_tokenizer = Whitespace()

    return PreTrainedTokenizerFast(
        tokenizer_object=tokenizer, unk_token="[UNK]", eos_token="[EOS]"
    )


def make_backbone(kind):
    kind = ModelKind.parse(kind)
    if kind == ModelKind.GPT2:
        return GPT2Model(
            GPT2Config(vocab_size=VOCAB_SIZE, n_positions=32, n_embd=16, n_layer=1, n_head=2)
        )
    if kind == ModelKind.ROBERTA:
        return RobertaModel(
            RobertaConfig(
                vocab_size=VOCAB_SIZE,
                hidden_size=16,
                num_hidden_layers=1,
                num_attention_heads=2,
                intermediate_size=32,
                max_position_embeddings=40,
            )
        )
    return ElectraModel(
        ElectraConfig(
            vocab_size=VOCAB_SIZE,
            embedding_size=16,
            hidden_size=16,
            num_hidden_layers=1,
            num_attention_heads=2,
            intermediate_size=32,
            max_position_embeddings=32,
        )
    )


def make_reviews(repeat: int = 2):
    reviews = []
    for _ in range(repeat):
        reviews += [(1, comment) for comment in POSITIVE]
        reviews += [(0, comment) for comment in NEGATIVE]
    return reviews


@pytest.fixture
def hf_tokenizer():
    return make_hf_tokenizer()


@pytest.fixture
def review_tokenizer():
    return ReviewTokenizer(make_hf_tokenizer(), max_seq_len=MAX_SEQ_LEN)


@pytest.fixture
def reviews():
    return make_reviews()


@pytest.fixture
def reviews_parquet(tmp_path):
    data = make_reviews(repeat=3)[:20]
    reviews_df = pd.DataFrame(
        {
            "comment": [comment for _, comment in data],
            "label": [label for label, _ in data],
        }
    )
    path = tmp_path / "reviews.parquet"
    reviews_df.to_parquet(path, engine="pyarrow", index=False)
    return str(path)
