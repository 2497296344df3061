"""Key-value, dataset, object, queue and vector storage services, and a bundle of all of them."""