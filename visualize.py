# Titanic Data and Model Comparison Visualizations
import os

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from loguru import logger

sns.set(style="whitegrid")


def create_visualization_folder(folder="visualizations"):
    """Create a folder for visualizations if it doesn't exist."""
    os.makedirs(folder, exist_ok=True)
    return folder


def plot_model_comparison(models, path="visualizations/model_comparison.png", metric="roc_auc"):
    """Box plot of the per-fold scores of each trained model, best median on top."""
    frame = pd.concat(
        [pd.DataFrame({"model": m.composite_id, "score": m.resample_scores}) for m in models],
        ignore_index=True,
    )
    order = frame.groupby("model")["score"].median().sort_values(ascending=False).index

    plt.figure(figsize=(10, max(4, 0.4 * len(order))))
    sns.boxplot(data=frame, x="score", y="model", order=order, color="skyblue")
    plt.title("Cross-Validated Model Comparison", fontsize=16)
    plt.xlabel(metric, fontsize=12)
    plt.ylabel("")
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    logger.info(f"Model comparison plot saved to {path}")
    return path


def visualize_survival_by_feature(data, feature, folder="visualizations"):
    """Visualize survival rate by a categorical feature."""
    plt.figure(figsize=(12, 6))

    # Create a crosstab for percentage calculation
    survival_rate = pd.crosstab(data[feature], data["Survived"])
    survival_rate_pct = survival_rate.div(survival_rate.sum(axis=1), axis=0) * 100
    rates = survival_rate_pct[1].sort_values(ascending=False)

    ax = rates.plot(kind="bar", color="skyblue")
    for i, v in enumerate(rates):
        ax.text(i, v + 1, f"{v:.1f}%", ha="center", fontsize=10)

    plt.title(f"Survival Rate by {feature}", fontsize=16)
    plt.xlabel(feature, fontsize=12)
    plt.ylabel("Survival Rate (%)", fontsize=12)
    plt.ylim(0, 100)
    plt.tight_layout()
    path = os.path.join(folder, f"survival_by_{feature.lower()}.png")
    plt.savefig(path)
    plt.close()
    return path
