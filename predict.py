# Titanic data preparation and submission writing
import pandas as pd
from loguru import logger

ID_COLUMN = "PassengerId"
TARGET = "Survived"
CATEGORICAL = ["Sex", "Embarked", "Title", "Cabin_Letter"]
FEATURES = ["Pclass", "Sex", "Age", "SibSp", "Parch", "Fare", "Embarked",
            "Title", "FamilySize", "IsAlone", "Cabin_Letter"]


def load_data(train_path="train.csv", test_path="test.csv", na_values=("NA", "")):
    """Load the training and test sets, treating the sentinel tokens as missing."""
    train = pd.read_csv(train_path, na_values=list(na_values), keep_default_na=False)
    test = pd.read_csv(test_path, na_values=list(na_values), keep_default_na=False)
    logger.info(f"Loaded {train.shape[0]} training and {test.shape[0]} test passengers")
    return train, test


def engineer_features(data):
    """Add Title, FamilySize, IsAlone and Cabin_Letter columns."""
    data = data.copy()

    # Extract titles from names and group the rare ones
    data["Title"] = data["Name"].str.extract(r" ([A-Za-z]+)\.", expand=False)
    data["Title"] = data["Title"].replace(["Lady", "Countess", "Capt", "Col", "Don", "Dr", "Major",
                                           "Rev", "Sir", "Jonkheer", "Dona"], "Rare")
    data["Title"] = data["Title"].replace(["Mlle", "Ms"], "Miss")
    data["Title"] = data["Title"].replace("Mme", "Mrs")
    data["Title"] = data["Title"].fillna("Rare")

    data["FamilySize"] = data["SibSp"] + data["Parch"] + 1
    data["IsAlone"] = (data["FamilySize"] == 1).astype(int)

    # first letter of cabin indicates deck, U for unknown
    data["Cabin_Letter"] = data["Cabin"].str.slice(0, 1).fillna("U")
    return data


def impute_missing(data):
    """Fill Age by title median, Fare by class median and Embarked by mode."""
    data = data.copy()
    data["Age"] = data.groupby("Title")["Age"].transform(lambda x: x.fillna(x.median()))
    data["Age"] = data["Age"].fillna(data["Age"].median())
    data["Fare"] = data.groupby("Pclass")["Fare"].transform(lambda x: x.fillna(x.median()))
    data["Fare"] = data["Fare"].fillna(data["Fare"].median())
    data["Embarked"] = data["Embarked"].fillna(data["Embarked"].mode()[0])
    return data


def prepare_datasets(train, test):
    """Engineer, impute and encode both sets together so their columns match.

    Returns (train_frame, test_frame, test_ids); the training frame keeps the
    Survived column as 0/1 integers.
    """
    combined = pd.concat([train.drop(columns=[TARGET]), test], keys=["train", "test"])
    combined = impute_missing(engineer_features(combined))

    X = pd.get_dummies(combined[FEATURES], columns=CATEGORICAL, drop_first=True, dtype=int)
    X_train = X.loc["train"].reset_index(drop=True)
    X_test = X.loc["test"].reset_index(drop=True)

    train_frame = X_train.assign(**{TARGET: train[TARGET].astype(int).to_numpy()})
    logger.info(f"Prepared {X_train.shape[1]} features: {X_train.columns.tolist()}")
    return train_frame, X_test, test[ID_COLUMN].reset_index(drop=True)


#test data to match training data
def align_features(X_test, X_train_columns):
    """Ensure test data has the same features, in the same order, as training data."""
    return X_test.reindex(columns=list(X_train_columns), fill_value=0)


def write_submission(model, X_test, ids, output_file="submission.csv"):
    """Write the two-column PassengerId,Survived file for the test passengers."""
    predictions = model.predict(X_test)
    results = pd.DataFrame({ID_COLUMN: ids, TARGET: pd.Series(predictions).astype(int)})
    results.to_csv(output_file, index=False)

    logger.info(f"Predictions saved to {output_file}")
    logger.info(f"Predicted survivors: {results[TARGET].sum()} ({results[TARGET].mean() * 100:.2f}%)")
    return results
