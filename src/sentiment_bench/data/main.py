from pathlib import Path

import hydra
import pyarrow as pa
import pyarrow.parquet as pq
from loguru import logger
from omegaconf import DictConfig, OmegaConf

from sentiment_bench.data.review_preprocessor import ReviewPreprocessor


@hydra.main(version_base=None, config_path="../config", config_name="config")
def main(cfg: DictConfig) -> None:
    logger.debug(OmegaConf.to_container(cfg))
    prepare_reviews(cfg)


def prepare_reviews(cfg: DictConfig) -> str:
    reviews_cfg = cfg.datasets.reviews
    review_preprocessor = ReviewPreprocessor()

    logger.info(f"Load reviews from: {reviews_cfg.raw} ...")
    reviews_df = review_preprocessor.load_reviews(
        reviews_cfg.raw, reviews_cfg.text_col, reviews_cfg.sentiment_col
    )
    reviews_df = review_preprocessor.encode_labels(
        reviews_df, OmegaConf.to_container(cfg.features.label_encoder)
    )
    reviews_df = review_preprocessor.clean_comments(reviews_df, clean=reviews_cfg.clean)
    reviews_df = review_preprocessor.sample_reviews(
        reviews_df, reviews_cfg.sample_size, seed=cfg.seed
    )

    # Check distribution of labels in the sample
    labels = review_preprocessor.count_labels(reviews_df)
    logger.info(f"Distribution of labels: \n{labels}")

    # Export sampled reviews
    reviews_df = reviews_df.rename(
        columns={"comment": cfg.features.review_col, "label": cfg.features.label_col}
    )[[cfg.features.review_col, cfg.features.label_col]]
    logger.info(f"\n{reviews_df.head(5)}")
    table = pa.Table.from_pandas(reviews_df, preserve_index=False)

    output_dir = Path(reviews_cfg.processed).parent
    output_dir.mkdir(parents=True, exist_ok=True)
    pq.write_table(table, reviews_cfg.processed)

    logger.info(f"Processed reviews written to {reviews_cfg.processed}")
    return reviews_cfg.processed


if __name__ == "__main__":
    main()
