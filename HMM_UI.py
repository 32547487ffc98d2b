import io
import os

import pandas as pd
import streamlit as st

from HMM import DEFAULT_MODEL_PATH, HiddenMarkovModel, TaggingError
from corpus import pairs_from_lines, tokenize

model_path = os.environ.get('HMM_MODEL', DEFAULT_MODEL_PATH)


@st.cache_resource
def get_model(path):
    model = HiddenMarkovModel()
    if os.path.exists(path):
        model.load(path)
    return model


def training_lines(upload, pasted):
    # an uploaded file wins over pasted text
    if upload is not None:
        return io.TextIOWrapper(upload, encoding='utf-8')
    return pasted.splitlines()


st.set_page_config(
    page_title="POS Tagging with Hidden Markov Model",
    layout="wide",
    initial_sidebar_state="expanded",
)

model = get_model(model_path)

st.title('POS Tagger')
st.markdown('Interface to predict part of speech tag for each word of a given sentence using Hidden Markov Model')

with st.sidebar:

    st.header("Train")
    sentences_file = st.file_uploader("Training sentences", type=["txt"])
    sentences_text = st.text_area("or paste sentences, one per line", key="sentences")
    tags_file = st.file_uploader("Training tags", type=["txt"])
    tags_text = st.text_area("or paste tags, one line per sentence", key="tags")

    ready = (sentences_file or sentences_text.strip()) and (tags_file or tags_text.strip())

    if st.button("Train Model", key="train", disabled=not ready):
        pairs = pairs_from_lines(training_lines(sentences_file, sentences_text),
                                 training_lines(tags_file, tags_text))

        summary = model.train(pairs)
        model.save(model_path)
        st.success(f"Trained on {summary.pairs} sentences ({summary.skipped} skipped), "
                   f"{summary.tags} tags and {summary.vocabulary} words")

st.header("Predict Tags")

if not model.is_trained:
    st.warning(f"No trained model found at {model_path}, train one from the sidebar first")

sentence = st.text_input('Enter Input Sentence', key="sentence")

if st.button("Predict POS Tags", key="predict"):
    words = tokenize(sentence)
    try:
        tags = model.predict(words)
    except TaggingError as e:
        st.error(str(e))
    else:
        st.subheader("Result :")
        st.dataframe(pd.DataFrame({'word': words, 'tag': tags}), hide_index=True)
