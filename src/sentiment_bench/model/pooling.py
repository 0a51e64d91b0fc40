import torch
from torch import nn


def masked_mean(hidden_state: torch.Tensor, attention_mask: torch.Tensor) -> torch.Tensor:
    """Average token embeddings while ignoring padded positions"""
    mask = attention_mask.unsqueeze(-1).to(hidden_state.dtype)
    summed = (hidden_state * mask).sum(dim=1)
    counts = mask.sum(dim=1).clamp(min=1.0)

    return summed / counts


class MeanPooling(nn.Module):
    def __init__(self):
        """Collapse the token axis of a transformer output into a single
        sentence embedding.

        Input is shape (batch_size, seq_len, hidden_dim) together with an
        attention mask of shape (batch_size, seq_len).
        Output is shape (batch_size, hidden_dim).
        """
        super().__init__()

    def forward(self, hidden_state, attention_mask):
        return masked_mean(hidden_state, attention_mask)
