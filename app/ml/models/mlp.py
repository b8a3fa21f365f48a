"""
MLP 기반 음성 스크리닝 모델
MFCC 요약 피처 벡터를 입력으로 클래스별 로짓 출력
"""
import torch
import torch.nn as nn
import torch.nn.functional as F


class DenseBlock(nn.Module):
    """Linear + BatchNorm + ReLU + Dropout"""

    def __init__(self, in_features: int, out_features: int, dropout: float = 0.2):
        super().__init__()
        self.fc = nn.Linear(in_features, out_features)
        self.bn = nn.BatchNorm1d(out_features)
        self.dropout = nn.Dropout(dropout)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        x = self.fc(x)
        x = self.bn(x)
        x = F.relu(x)
        x = self.dropout(x)
        return x


class ScreeningMLP(nn.Module):
    """
    피처 벡터 분류기

    Architecture:
    - 2개의 Dense Blocks
    - 클래스 수만큼의 출력 로짓
    """

    def __init__(
        self,
        input_length: int,
        num_classes: int = 2,
        hidden_size: int = 64,
        dropout: float = 0.2
    ):
        super().__init__()

        self.input_length = input_length
        self.num_classes = num_classes

        self.block1 = DenseBlock(input_length, hidden_size, dropout=dropout)
        self.block2 = DenseBlock(hidden_size, hidden_size // 2, dropout=dropout)
        self.classifier = nn.Linear(hidden_size // 2, num_classes)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        x = self.block1(x)
        x = self.block2(x)
        return self.classifier(x)
