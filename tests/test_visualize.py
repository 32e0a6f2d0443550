import os

import pandas as pd

from resampling import ResamplingPolicy
from visualize import create_visualization_folder, plot_model_comparison, visualize_survival_by_feature


def test_plot_model_comparison_writes_png(tmp_path, fake_trainer, make_spec):
    trainer = fake_trainer({"knn.ori": 0.8, "nb.smote": 0.7})
    spec = make_spec(["knn", "nb"])
    models = [trainer("knn", ResamplingPolicy.ORIGINAL, spec), trainer("nb", ResamplingPolicy.SMOTE, spec)]

    path = plot_model_comparison(models, str(tmp_path / "comparison.png"))

    assert os.path.getsize(path) > 0


def test_survival_by_feature(tmp_path):
    folder = create_visualization_folder(str(tmp_path / "plots"))
    data = pd.DataFrame({"Sex": ["male", "female", "female", "male"], "Survived": [0, 1, 1, 1]})

    path = visualize_survival_by_feature(data, "Sex", folder)

    assert path.endswith("survival_by_sex.png")
    assert os.path.exists(path)
