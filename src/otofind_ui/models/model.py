# model.py
# scalar-output wrapper around torchvision backbones

from __future__ import annotations

import torch
from torch import nn
from torch.nn import init


class OtoModel(nn.Module):
    """
    Scalar confidence model for a single otoscopic finding.

    This class wraps a torchvision backbone (ResNet or MobileNet family) and
    replaces its final classification layer with a single-unit head. The
    forward pass returns the raw logit; callers apply the sigmoid.

    Parameters
    ----------
    base_model : nn.Module
        torchvision backbone. ResNet models expose ``fc``, MobileNet models
        expose ``classifier``; whichever is present is replaced.

    Attributes
    ----------
    base_model : nn.Module
        Backbone with its original head replaced by ``nn.Identity``
    dropout : nn.Dropout
        Dropout layer (p=0.1) applied before the head
    fc : nn.Linear
        Scalar head (features -> 1 logit)

    Examples
    --------
    >>> from torchvision import models as tvm
    >>> from otofind_ui.models import OtoModel
    >>>
    >>> model = OtoModel(tvm.resnet18(weights=None)).eval()
    >>> x = torch.randn(1, 3, 224, 224)
    >>> model(x).shape
    torch.Size([1, 1])

    See Also
    --------
    otofind_ui.models.model_util.load_pretrained_model : Load trained weights
    """

    def __init__(self, base_model: nn.Module):
        super().__init__()
        self.base_model = base_model

        # ── swap the backbone head for identity – we add our own ─────────
        if hasattr(base_model, "fc"):
            in_features = base_model.fc.in_features
            base_model.fc = nn.Identity()
        elif hasattr(base_model, "classifier"):
            in_features = _first_linear(base_model.classifier).in_features
            base_model.classifier = nn.Identity()
        else:
            raise ValueError(
                f"Unsupported backbone {type(base_model).__name__}: "
                "expected an 'fc' or 'classifier' head"
            )

        self.dropout = nn.Dropout(p=0.1)
        self.fc = nn.Linear(in_features, 1)
        self.fc.apply(init_weights)

    # ------------------------------------------------------------------
    # forward
    # ------------------------------------------------------------------
    def forward(self, x: torch.Tensor) -> torch.Tensor:  # type: ignore[override]
        feats = self.base_model(x)
        feats = self.dropout(feats)
        return self.fc(feats)


# ----------------------------------------------------------------------
# utils
# ----------------------------------------------------------------------


def _first_linear(head: nn.Module) -> nn.Linear:
    if isinstance(head, nn.Linear):
        return head
    linears = [m for m in head.modules() if isinstance(m, nn.Linear)]
    if not linears:
        raise ValueError("classifier head contains no linear layer")
    return linears[0]


def init_weights(m: nn.Module) -> None:
    """
    Initialize weights for linear layers using Xavier uniform initialization.

    Parameters
    ----------
    m : nn.Module
        Module to initialize (only linear layers are affected)

    Notes
    -----
    - Linear layer weights: Xavier uniform initialization
    - Linear layer biases: Constant fill with 0.01
    - Other module types: No initialization applied

    Examples
    --------
    >>> import torch.nn as nn
    >>> fc = nn.Linear(512, 1)
    >>> init_weights(fc)
    """
    if isinstance(m, nn.Linear):
        init.xavier_uniform_(m.weight)
        if m.bias is not None:
            m.bias.data.fill_(0.01)
